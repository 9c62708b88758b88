from __future__ import annotations

from flask import Flask

from ..common.http import ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/employees/cnic-conflicts", methods=["GET"], endpoint="employees_cnic_conflicts")
    def employees_cnic_conflicts():
        conflicts = container.employee_service.find_cnic_conflicts()
        return ok([{"cnic": c.cnic, "emp_codes": list(c.emp_codes)} for c in conflicts])
