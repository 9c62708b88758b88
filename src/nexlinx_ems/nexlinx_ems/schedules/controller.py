from __future__ import annotations

from datetime import date, timedelta

from flask import Flask, request

from ..common.http import date_param, fail, int_param, json_body, ok
from ..core.constants import DEFAULT_REPORT_DAYS
from ..core.exceptions import ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/schedules", methods=["GET"], endpoint="schedules_list")
    def schedules_list():
        today = date.today()
        emp_code = (request.args.get("emp_code") or "").strip() or None
        try:
            start = date_param(request.args.get("start"), "start", default=today)
            end = date_param(request.args.get("end"), "end", default=today + timedelta(days=DEFAULT_REPORT_DAYS))
            schedules = container.schedule_service.list_range(start=start, end=end, emp_code=emp_code)
        except ValidationError as e:
            return fail(str(e), 400)

        return ok(
            [
                {
                    "schedule_id": s.schedule_id,
                    "emp_code": s.emp_code,
                    "work_date": s.work_date.isoformat(),
                    "shift_id": s.shift_id,
                    "note": s.note,
                }
                for s in schedules
            ]
        )

    @app.route("/api/schedules", methods=["POST"], endpoint="schedules_assign")
    def schedules_assign():
        data = json_body(request)
        try:
            schedule_id = container.schedule_service.assign(
                emp_code=str(data.get("emp_code") or ""),
                work_date=date_param(data.get("work_date"), "work_date"),
                shift_id=int_param(data.get("shift_id"), "shift_id"),
                note=data.get("note"),
            )
        except ValidationError as e:
            return fail(str(e), 400)
        return ok({"schedule_id": schedule_id}, 201)

    @app.route("/api/schedules/<int:schedule_id>", methods=["DELETE"], endpoint="schedules_delete")
    def schedules_delete(schedule_id: int):
        try:
            container.schedule_service.delete(schedule_id=schedule_id)
        except ValidationError as e:
            return fail(str(e), 404)
        return ok({"schedule_id": schedule_id})
