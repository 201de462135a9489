from __future__ import annotations

import uuid


def new_record_id(table: str) -> str:
    return f"{table}:{uuid.uuid4()}"


def parse_record_id(value: str, default_table: str) -> str:
    """Qualify a record id with its table.

    Accepts either the full ``table:key`` form or a bare key, in which case
    ``default_table`` is used::

        parse_record_id("subjects:abc", "subjects")  # "subjects:abc"
        parse_record_id("abc", "subjects")           # "subjects:abc"
    """
    value = value.strip()
    if ":" in value:
        table, key = value.split(":", 1)
        return f"{table}:{key}"
    return f"{default_table}:{value}"


def record_table(record_id: str) -> str:
    table, sep, _ = record_id.partition(":")
    if not sep or not table:
        raise ValueError(f"Malformed record id: {record_id!r}")
    return table
