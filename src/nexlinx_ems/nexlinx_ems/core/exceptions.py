class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class BioTimeError(DomainError):
    """Raised when the BioTime API cannot be reached or answers with an error."""


class BioTimeAuthError(BioTimeError):
    """Raised when BioTime rejects the configured credentials."""


class ProcessingError(DomainError):
    """Raised when a pipeline step cannot complete."""
