from __future__ import annotations

import logging

from flask import Flask, request

from ..common.datetime_utils import now_local
from ..common.http import date_param, datetime_param, fail, int_param, json_body, ok
from ..core.exceptions import BioTimeError, ValidationError
from ..container import Container

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/api/biotime/sync", methods=["POST"], endpoint="biotime_sync")
    def biotime_sync():
        """Pull from BioTime now.

        Body (all optional): {"start": ..., "end": ...} date-times, or
        {"start_id": ..., "end_id": ...}; empty body polls incrementally.
        """
        data = json_body(request)
        now = now_local()
        try:
            if data.get("start_id") is not None:
                result = container.poller.pull_id_range(
                    int_param(data.get("start_id"), "start_id"),
                    int_param(data.get("end_id"), "end_id"),
                    now=now,
                )
            elif data.get("start"):
                start = datetime_param(data.get("start"), "start")
                end = datetime_param(data.get("end"), "end") or now
                result = container.poller.pull_range(start, end, now=now)
            else:
                result = container.poller.poll(now=now)
        except ValidationError as e:
            return fail(str(e), 400)
        except BioTimeError as e:
            logger.error("BioTime sync failed: %s", e)
            return fail(str(e), 502)
        return ok(result.to_dict())

    @app.route("/api/biotime/gaps/fill", methods=["POST"], endpoint="biotime_gap_fill")
    def biotime_gap_fill():
        data = json_body(request)
        try:
            start = date_param(data.get("start"), "start") if data.get("start") else None
            end = date_param(data.get("end"), "end") if data.get("end") else None
            report = container.gap_filler.fill(start, end)
        except ValidationError as e:
            return fail(str(e), 400)
        except BioTimeError as e:
            logger.error("BioTime gap fill failed: %s", e)
            return fail(str(e), 502)
        return ok(report.to_dict())

    @app.route("/api/biotime/status", methods=["GET"], endpoint="biotime_status")
    def biotime_status():
        status = container.biotime_client.status()
        last = container.staging_repo.last_punch_time()
        status["last_punch_time"] = last.isoformat() if last else None
        status["max_biotime_id"] = container.staging_repo.max_biotime_id()
        status["duplicate_punches"] = container.staging_maintenance.count_duplicates()
        return ok(status)
