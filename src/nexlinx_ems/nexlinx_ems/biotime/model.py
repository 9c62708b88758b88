from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from ..common.datetime_utils import parse_punch_time
from ..core.constants import ACCESS_CONTROL_MARKER
from ..core.exceptions import ValidationError


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass(frozen=True)
class RawPunch:
    """One transaction row as returned by iclock/api/transactions/."""

    biotime_id: Optional[int]
    emp_code: str
    punch_time: datetime
    punch_state: Optional[str] = None
    terminal_sn: Optional[str] = None
    terminal_alias: Optional[str] = None
    verify_type: Optional[str] = None
    area_alias: Optional[str] = None
    raw: dict = field(default_factory=dict, compare=False, repr=False)

    @property
    def is_access_control(self) -> bool:
        """Door-lock terminals report through BioTime too; they are not attendance."""
        alias = (self.terminal_alias or "").lower()
        return ACCESS_CONTROL_MARKER in alias

    @classmethod
    def from_api(cls, row: dict) -> "RawPunch":
        emp_code = _clean(row.get("emp_code"))
        if not emp_code:
            raise ValidationError(f"Transaction {row.get('id')!r} has no emp_code")

        try:
            punch_time = parse_punch_time(row.get("punch_time"))
        except ValueError as exc:
            raise ValidationError(f"Transaction {row.get('id')!r}: {exc}") from exc

        biotime_id = row.get("id")
        return cls(
            biotime_id=int(biotime_id) if biotime_id not in (None, "") else None,
            emp_code=emp_code,
            punch_time=punch_time,
            punch_state=_clean(row.get("punch_state")),
            terminal_sn=_clean(row.get("terminal_sn")),
            terminal_alias=_clean(row.get("terminal_alias")),
            verify_type=_clean(row.get("verify_type")),
            area_alias=_clean(row.get("area_alias")),
            raw=dict(row),
        )
