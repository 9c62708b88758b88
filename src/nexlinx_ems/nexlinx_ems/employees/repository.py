from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Employee


class EmployeeRepository(Protocol):
    def get_by_code(self, emp_code: str) -> Optional[Employee]:
        raise NotImplementedError

    def list_active(self) -> Sequence[Employee]:
        raise NotImplementedError

    def list_cnic_rows(self) -> Sequence[tuple[str, str]]:
        """(emp_code, raw cnic) for every employee with a CNIC on file."""

        raise NotImplementedError
