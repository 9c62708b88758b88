from __future__ import annotations

from datetime import date, datetime, time
from types import SimpleNamespace

import pytest
from flask import Flask

from src.nexlinx_ems.nexlinx_ems.attendance.controller import register as register_attendance
from src.nexlinx_ems.nexlinx_ems.biotime.controller import register as register_biotime
from src.nexlinx_ems.nexlinx_ems.core.exceptions import BioTimeError
from src.nexlinx_ems.nexlinx_ems.employees.model import Employee
from src.nexlinx_ems.nexlinx_ems.employees.controller import register as register_employees
from src.nexlinx_ems.nexlinx_ems.employees.service import EmployeeService
from src.nexlinx_ems.nexlinx_ems.reports.service import AttendanceReportService
from src.nexlinx_ems.nexlinx_ems.schedules.controller import register as register_schedules
from src.nexlinx_ems.nexlinx_ems.schedules.service import ScheduleService
from src.nexlinx_ems.nexlinx_ems.shifts.model import Shift
from tests.fakes import InMemoryAttendance, InMemoryEmployees, InMemorySchedules, InMemoryShifts


class FailingPoller:
    def poll(self, *, now=None):
        raise BioTimeError("BioTime unreachable")


@pytest.fixture
def client():
    employees = InMemoryEmployees.of(
        Employee(1, "1001", "Ali", cnic="35202-1234567-1"),
        Employee(2, "1002", "Ali K.", cnic="3520212345671"),
    )
    attendance = InMemoryAttendance(employees)
    attendance.add(
        emp_code="1001", work_date=date(2025, 3, 10), check_in=datetime(2025, 3, 10, 9, 0),
        check_out=datetime(2025, 3, 10, 17, 0), hours_worked=8.0,
    )
    container = SimpleNamespace(
        poller=FailingPoller(),
        attendance_repo=attendance,
        report_service=AttendanceReportService(attendance, employees),
        employee_service=EmployeeService(employees),
        schedule_service=ScheduleService(
            InMemorySchedules(),
            InMemoryShifts({1: Shift(shift_id=1, shift_name="Day", start_time=time(9), end_time=time(17))}),
            employees,
        ),
    )

    app = Flask(__name__)
    register_biotime(app, container)
    register_attendance(app, container)
    register_employees(app, container)
    register_schedules(app, container)
    return app.test_client()


def test_biotime_failure_maps_to_502(client):
    resp = client.post("/api/biotime/sync", json={})
    assert resp.status_code == 502
    assert resp.get_json() == {"success": False, "message": "BioTime unreachable"}


def test_bad_date_maps_to_400(client):
    resp = client.get("/api/attendance?start=10-03-2025")
    assert resp.status_code == 400
    assert resp.get_json()["success"] is False


def test_attendance_list(client):
    resp = client.get("/api/attendance?start=2025-03-10&end=2025-03-10")
    body = resp.get_json()
    assert resp.status_code == 200
    assert body["data"][0]["emp_code"] == "1001"
    assert body["data"][0]["payable_hours"] == 8.0


def test_hours_report(client):
    resp = client.get("/api/attendance/hours?start=2025-03-10&end=2025-03-10")
    assert resp.get_json()["data"]["summary"][0]["total_hours"] == "08:00"


def test_cnic_conflicts(client):
    resp = client.get("/api/employees/cnic-conflicts")
    assert resp.get_json()["data"] == [{"cnic": "3520212345671", "emp_codes": ["1001", "1002"]}]


def test_schedule_roundtrip(client):
    created = client.post("/api/schedules", json={"emp_code": "1001", "work_date": "2025-03-11", "shift_id": 1})
    assert created.status_code == 201
    schedule_id = created.get_json()["data"]["schedule_id"]

    listed = client.get("/api/schedules?start=2025-03-11&end=2025-03-11").get_json()["data"]
    assert [s["schedule_id"] for s in listed] == [schedule_id]

    assert client.delete(f"/api/schedules/{schedule_id}").status_code == 200
    assert client.delete(f"/api/schedules/{schedule_id}").status_code == 404


def test_schedule_validation(client):
    resp = client.post("/api/schedules", json={"emp_code": "1001", "work_date": "2025-03-11", "shift_id": "x"})
    assert resp.status_code == 400


def test_non_string_date_in_body_maps_to_400(client):
    resp = client.post("/api/schedules", json={"emp_code": "1001", "work_date": 20250311, "shift_id": 1})
    assert resp.status_code == 400
    assert resp.get_json()["message"].startswith("work_date must be YYYY-MM-DD")


def test_non_string_range_in_overbilling_body_maps_to_400(client):
    resp = client.post("/api/attendance/overbilling", json={"start": ["2025-03-10"]})
    assert resp.status_code == 400
