"""Base model for canonical plant readings.

Every subsystem model inherits from :class:`PlantBaseModel` which
provides:

* Frozen instances, so a published snapshot can never be mutated by a
  reader.
* A ``model_validator(mode="before")`` that coerces each incoming value
  to the field's declared type and drops values that cannot be coerced,
  so the field default is used instead. Readers therefore never observe
  a missing or malformed field.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator

from wtpsync.ingestion.normalize import safe_bool, safe_float, safe_str

_COERCERS: dict[Any, Callable[[Any], Any]] = {
    float: safe_float,
    bool: safe_bool,
    str: safe_str,
}


class PlantBaseModel(BaseModel):
    """Base for canonical subsystem models.

    Fields annotated as ``float``, ``bool`` or ``str`` are coerced with
    the helpers from :mod:`wtpsync.ingestion.normalize`; other fields are
    passed through to pydantic unchanged.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    @model_validator(mode="before")
    @classmethod
    def _coerce_or_default(cls, values: Any) -> Any:
        if not isinstance(values, Mapping):
            return values

        cleaned: dict[str, Any] = {}
        for name, field in cls.model_fields.items():
            key = name if name in values else field.alias
            if key is None or key not in values:
                continue
            value = values[key]
            coerce = _COERCERS.get(field.annotation)
            if coerce is None:
                cleaned[name] = value
                continue
            parsed = coerce(value)
            if parsed is not None:
                cleaned[name] = parsed
        return cleaned
