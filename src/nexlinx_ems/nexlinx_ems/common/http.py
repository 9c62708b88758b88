from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional

from flask import jsonify

from ..core.exceptions import ValidationError
from .datetime_utils import parse_iso_date, parse_punch_time


def ok(data: Any, status: int = 200):
    return jsonify({"success": True, "data": data}), status


def fail(message: str, status: int):
    return jsonify({"success": False, "message": message}), status


def date_param(value: Optional[str], field_name: str, default: Optional[date] = None) -> date:
    if not value:
        if default is None:
            raise ValidationError(f"{field_name} is required (YYYY-MM-DD)")
        return default
    try:
        return parse_iso_date(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be YYYY-MM-DD: {value!r}")


def datetime_param(value: Optional[str], field_name: str) -> Optional[datetime]:
    if not value:
        return None
    try:
        return parse_punch_time(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a date-time: {value!r}")


def int_param(value: Any, field_name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")


def json_body(request) -> dict:
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}
