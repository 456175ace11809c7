"""Translate metadata filter objects into Milvus boolean expressions.

Filters use a small operator vocabulary over the JSON ``metadata`` field::

    {"batch": {"$eq": "W24"}, "team_size": {"$gte": 20}, "tags": {"$in": ["AI"]}}

becomes::

    (metadata["batch"] == "W24") and (metadata["team_size"] >= 20)
        and (json_contains_any(metadata["tags"], ["AI"]))

Array-valued metadata (regions, tags) is matched with the ``json_contains``
family, scalar fields with comparison operators. Scalar ``$in`` expands to an
OR of equality tests.
"""

from __future__ import annotations

import json
import re
from typing import Any, Dict, List, Mapping, Optional

METADATA_FIELD = "metadata"

OPERATORS = ("$eq", "$in", "$gte", "$lte")

# Metadata keys that hold arrays in the collection.
ARRAY_FIELDS = frozenset({"regions", "tags"})

_KEY_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _literal(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    raise ValueError(f"Unsupported filter value {value!r} ({type(value).__name__})")


def _check_list(values: Any) -> None:
    if not isinstance(values, (list, tuple)):
        raise ValueError(f"$in expects a list, got {values!r}")
    if not values:
        raise ValueError("$in expects a non-empty list")


def _list_literal(values: Any) -> str:
    _check_list(values)
    return "[" + ", ".join(_literal(v) for v in values) + "]"


def _field_ref(key: str) -> str:
    if not _KEY_RE.match(key):
        raise ValueError(f"Invalid metadata field name {key!r}")
    return f'{METADATA_FIELD}["{key}"]'


def _clause(key: str, op: str, value: Any) -> str:
    ref = _field_ref(key)
    if key in ARRAY_FIELDS:
        if op == "$in":
            return f"json_contains_any({ref}, {_list_literal(value)})"
        if op == "$eq":
            return f"json_contains({ref}, {_literal(value)})"
        raise ValueError(f"Operator {op} is not supported on array field {key!r}")

    if op == "$eq":
        return f"{ref} == {_literal(value)}"
    if op == "$in":
        # Milvus only accepts `in` on top-level fields, not JSON paths
        _check_list(value)
        return " or ".join(f"{ref} == {_literal(v)}" for v in value)
    if op in ("$gte", "$lte"):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"{op} on {key!r} expects a number, got {value!r}")
        symbol = ">=" if op == "$gte" else "<="
        return f"{ref} {symbol} {_literal(value)}"
    raise ValueError(f"Unknown filter operator {op!r} for field {key!r}")


def build_filter_expression(filter: Optional[Mapping[str, Any]]) -> Optional[str]:
    """Return a Milvus expression for ``filter``, or None when there is nothing to filter.

    Raises:
        ValueError: on unknown operators, non-object operator blocks or
            values that cannot be expressed.
    """
    if not filter:
        return None

    clauses: List[str] = []
    for key, condition in filter.items():
        if not isinstance(condition, Mapping):
            raise ValueError(
                f"Filter for {key!r} must be an operator object like {{'$eq': ...}}, got {condition!r}"
            )
        if not condition:
            continue
        for op, value in condition.items():
            clauses.append(f"({_clause(key, op, value)})")

    if not clauses:
        return None
    return " and ".join(clauses)


def metadata_subset(metadata: Mapping[str, Any], keys: List[str]) -> Dict[str, Any]:
    """Pick ``keys`` out of ``metadata``; absent keys map to None."""
    return {k: metadata.get(k) for k in keys}
