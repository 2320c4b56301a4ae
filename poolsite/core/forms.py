# poolsite/core/forms.py
#
# Helpers for reading urlencoded / multipart admin forms.

import re
from datetime import datetime

from fastapi import Request
from starlette.datastructures import FormData

TRUE_VALUES = {"true", "on", "1", "yes"}

_INDEXED_FIELD = re.compile(r"^(?P<prefix>\w+)\[(?P<index>\d+)\]\[(?P<field>\w+)\]$")


def form_str(form: FormData, key: str, default: str = "") -> str:
    value = form.get(key)
    if value is None or not isinstance(value, str):
        return default
    return value.strip()


def form_optional_str(form: FormData, key: str) -> str | None:
    value = form_str(form, key)
    return value or None


def parse_bool(value, default: bool = False) -> bool:
    if value is None:
        return default
    return str(value).strip().lower() in TRUE_VALUES


def form_bool(form: FormData, key: str, default: bool = False) -> bool:
    values = form.getlist(key)
    if not values:
        return default
    # hidden "false" input followed by a checked checkbox: last one wins
    return parse_bool(values[-1])


def form_int(form: FormData, key: str, default: int = 0) -> int:
    try:
        return int(form_str(form, key))
    except ValueError:
        return default


def form_id(form: FormData, key: str) -> int | None:
    value = form_str(form, key)
    return int(value) if value.isdigit() else None


def form_list(form: FormData, key: str) -> list[str]:
    values = form.getlist(key) + form.getlist(f"{key}[]")
    return [v.strip() for v in values if isinstance(v, str) and v.strip()]


def form_id_list(form: FormData, key: str) -> list[int]:
    return [int(v) for v in form_list(form, key) if v.isdigit()]


def split_keywords(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [k.strip() for k in raw.split(",") if k.strip()]


def parse_datetime(raw: str | None) -> datetime | None:
    """Parse ``YYYY-MM-DD`` or an ISO datetime; raises ValueError on garbage."""
    if not raw:
        return None
    return datetime.fromisoformat(raw.strip())


async def read_form(request: Request) -> FormData:
    """Form body as a dependency, so the endpoint itself can be a plain ``def``."""
    return await request.form()


def parse_indexed(form: FormData, prefix: str) -> list[dict]:
    """Collect ``prefix[N][field]`` keys into dicts, in order of first appearance."""
    rows: dict[str, dict] = {}

    for key, value in form.multi_items():
        match = _INDEXED_FIELD.match(key)
        if not match or match.group("prefix") != prefix:
            continue
        row = rows.setdefault(match.group("index"), {})
        row[match.group("field")] = value

    return list(rows.values())
