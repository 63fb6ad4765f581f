"""Canonical display strings for literal default values."""

from __future__ import annotations

import json
import math
from collections.abc import Mapping
from datetime import date, datetime, time, timezone
from typing import Any


def _iso_instant(value: date) -> str:
    if not isinstance(value, datetime):
        value = datetime.combine(value, time.min)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def _scalar(value: Any) -> str:
    if isinstance(value, float):
        if not math.isfinite(value):
            return "null"
        if value.is_integer():
            return str(int(value))
    if callable(value):
        return "undefined"
    try:
        return json.dumps(value, ensure_ascii=False)
    except (TypeError, ValueError):
        return json.dumps(str(value), ensure_ascii=False)


def stringify_value(value: Any) -> str:
    """Render ``value`` as compact literal text: ``[1,2]``, ``{a:"x"}``, ``true``.

    Self-referencing containers recurse without bound.
    """
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(stringify_value(element) for element in value) + "]"
    if isinstance(value, date):
        return _iso_instant(value)
    if isinstance(value, Mapping):
        return "{" + ",".join(f"{key}:{stringify_value(item)}" for key, item in value.items()) + "}"
    return _scalar(value)


__all__ = ["stringify_value"]
