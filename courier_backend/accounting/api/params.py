# accounting/api/params.py

"""Query-string parsing shared by the list endpoints."""

from __future__ import annotations

from datetime import date

from django.utils.dateparse import parse_date
from rest_framework.exceptions import ValidationError


def parse_bool(raw):
    if raw is None:
        return None
    raw = str(raw).strip().lower()
    if raw in ("1", "true", "yes"):
        return True
    if raw in ("0", "false", "no"):
        return False
    return None


def parse_date_param(raw, *, name: str) -> date | None:
    raw = (raw or "").strip()
    if not raw:
        return None
    try:
        value = parse_date(raw)
    except ValueError:
        value = None
    if value is None:
        raise ValidationError({name: "Use YYYY-MM-DD."})
    return value
