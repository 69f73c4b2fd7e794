# questboard/infra/serialization.py
from __future__ import annotations

from dataclasses import fields, is_dataclass
from datetime import datetime, timezone
from enum import Enum
from types import UnionType
from typing import Any, Union, get_args, get_origin, get_type_hints

# ---------- Encoding (Python -> BSON-friendly) ----------


def to_bson(x: Any) -> Any:
    # Enums -> their .value so PyMongo can encode them
    if isinstance(x, Enum):
        return x.value

    # datetime -> naive UTC (what PyMongo stores)
    if isinstance(x, datetime):
        if x.tzinfo is not None:
            x = x.astimezone(timezone.utc).replace(tzinfo=None)
        return x

    # dataclasses -> dict (recurse)
    if is_dataclass(x) and not isinstance(x, type):
        return {f.name: to_bson(getattr(x, f.name)) for f in fields(x)}

    if isinstance(x, dict):
        return {k: to_bson(v) for k, v in x.items()}

    if isinstance(x, (list, tuple)):
        return [to_bson(v) for v in x]

    # everything else: pass through (int, str, bool, None, etc.)
    return x


# ---------- Decoding (BSON -> Python/dataclasses) ----------


def from_bson(cls: type, doc: Any) -> Any:
    """
    Reconstruct a dataclass instance of type `cls` from a plain dict `doc`.
    Ignores extra fields like Mongo's internal `_id` or index flags.
    """
    if doc is None:
        return None

    if is_dataclass(cls):
        kwargs = {}
        type_hints = get_type_hints(cls)
        for f in fields(cls):
            if f.name not in doc:
                continue
            expected_type = type_hints.get(f.name, f.type)
            kwargs[f.name] = _from_bson_value(expected_type, doc[f.name])
        return cls(**kwargs)

    return _from_bson_value(cls, doc)


def _from_bson_value(expected_type: Any, value: Any) -> Any:
    if value is None:
        return None

    # Handle typing.Optional[...] / Union[..., None]
    if get_origin(expected_type) in (Union, UnionType):
        inner = next(
            (a for a in get_args(expected_type) if a is not type(None)), Any
        )
        return _from_bson_value(inner, value)

    if isinstance(expected_type, type) and is_dataclass(expected_type):
        return from_bson(expected_type, value)

    if isinstance(expected_type, type) and issubclass(expected_type, Enum):
        return expected_type(value)

    # Datetime: stored as naive UTC; return UTC-aware
    if expected_type is datetime and isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    return value
