"""Base models for pyevsim records.

Every record inherits from :class:`EvSimModel` which provides:

* ``alias_generator=to_camel`` so snake_case fields serialize to the
  camelCase keys the dashboard and the advisory service use.
* ``frozen=True`` so a record can only be replaced, never edited in place.

Advisory responses inherit from :class:`AdvisoryResponseModel`, which ignores
unknown keys instead of rejecting them.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class EvSimModel(BaseModel):
    """Base for internal records and advisory requests."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the camelCase JSON-compatible payload, dropping ``None`` fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class AdvisoryResponseModel(BaseModel):
    """Base for advisory service responses."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )
