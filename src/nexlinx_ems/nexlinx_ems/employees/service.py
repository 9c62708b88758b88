from __future__ import annotations

import logging
from collections import defaultdict

from ..common.validators import normalize_cnic
from ..core.exceptions import ValidationError
from .model import CnicConflict
from .repository import EmployeeRepository

logger = logging.getLogger(__name__)


class EmployeeService:
    def __init__(self, employees: EmployeeRepository):
        self._employees = employees

    def find_cnic_conflicts(self) -> list[CnicConflict]:
        """CNICs claimed by more than one employee code.

        Reported only; resolving which code is authoritative is an HR decision.
        Malformed CNICs are logged and skipped.
        """

        codes_by_cnic: dict[str, set[str]] = defaultdict(set)
        for emp_code, raw in self._employees.list_cnic_rows():
            try:
                codes_by_cnic[normalize_cnic(raw)].add(emp_code)
            except ValidationError:
                logger.warning("Skipping malformed CNIC for %s: %r", emp_code, raw)

        conflicts = [
            CnicConflict(cnic=cnic, emp_codes=tuple(sorted(codes)))
            for cnic, codes in codes_by_cnic.items()
            if len(codes) > 1
        ]
        conflicts.sort(key=lambda c: c.cnic)
        return conflicts
