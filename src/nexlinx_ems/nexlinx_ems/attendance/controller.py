from __future__ import annotations

from datetime import date, timedelta

from flask import Flask, request

from ..common.datetime_utils import now_local
from ..common.http import date_param, fail, json_body, ok
from ..core.constants import DEFAULT_REPORT_DAYS
from ..core.exceptions import ValidationError
from ..container import Container
from .model import AttendanceRecord


def _record_to_dict(r: AttendanceRecord) -> dict:
    return {
        "attendance_id": r.attendance_id,
        "emp_code": r.emp_code,
        "work_date": r.work_date.isoformat(),
        "check_in": r.check_in.isoformat(),
        "check_out": r.check_out.isoformat() if r.check_out else None,
        "hours_worked": r.hours_worked,
        "payable_hours": r.payable_hours,
        "status": r.status.value,
        "arrival_status": r.arrival_status.value if r.arrival_status else None,
        "departure_status": r.departure_status.value if r.departure_status else None,
        "late_minutes": r.late_minutes,
        "deduction_minutes": r.deduction_minutes,
        "lateness_tier": r.lateness_tier.value if r.lateness_tier else None,
        "adjustment_reason": r.adjustment_reason,
        "notes": r.notes,
    }


def _default_range(args) -> tuple[date, date]:
    today = date.today()
    start = date_param(args.get("start"), "start", default=today - timedelta(days=DEFAULT_REPORT_DAYS))
    end = date_param(args.get("end"), "end", default=today)
    return start, end


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance/process", methods=["POST"], endpoint="attendance_process")
    def attendance_process():
        result = container.normalizer.process(now=now_local())
        return ok(result.to_dict())

    @app.route("/api/attendance/classify", methods=["POST"], endpoint="attendance_classify")
    def attendance_classify():
        data = json_body(request)
        try:
            start = date_param(data.get("start"), "start") if data.get("start") else None
            end = date_param(data.get("end"), "end") if data.get("end") else None
            result = container.timing_classifier.classify_pending(
                start=start,
                end=end,
                reclassify=bool(data.get("reclassify", False)),
            )
        except ValidationError as e:
            return fail(str(e), 400)
        return ok(result.to_dict())

    @app.route("/api/attendance/overbilling", methods=["POST"], endpoint="attendance_overbilling")
    def attendance_overbilling():
        data = json_body(request)
        try:
            start, end = _default_range(data)
            summary = container.overbilling_processor.process(start=start, end=end)
        except ValidationError as e:
            return fail(str(e), 400)
        return ok(summary.to_dict())

    @app.route("/api/attendance/auto-punchout", methods=["POST"], endpoint="attendance_auto_punchout")
    def attendance_auto_punchout():
        result = container.auto_punchout_service.run(now=now_local())
        return ok(result.to_dict())

    @app.route("/api/attendance", methods=["GET"], endpoint="attendance_list")
    def attendance_list():
        try:
            start, end = _default_range(request.args)
            if end < start:
                raise ValidationError("start must not be after end")
        except ValidationError as e:
            return fail(str(e), 400)

        emp_code = (request.args.get("emp_code") or "").strip() or None
        records = container.attendance_repo.list_range(start=start, end=end, emp_code=emp_code)
        return ok([_record_to_dict(r) for r in records])

    @app.route("/api/attendance/metrics", methods=["GET"], endpoint="attendance_metrics")
    def attendance_metrics():
        try:
            work_date = date_param(request.args.get("date"), "date", default=date.today())
        except ValidationError as e:
            return fail(str(e), 400)
        return ok(container.report_service.daily_metrics(work_date).to_dict())

    @app.route("/api/attendance/hours", methods=["GET"], endpoint="attendance_hours")
    def attendance_hours():
        emp_code = (request.args.get("emp_code") or "").strip() or None
        try:
            start, end = _default_range(request.args)
            report = container.report_service.hours_report(start=start, end=end, emp_code=emp_code)
        except ValidationError as e:
            return fail(str(e), 400)
        return ok(report.to_dict())
