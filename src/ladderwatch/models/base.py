"""Shared pydantic base for payloads from the remote API."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Accepts the API's camelCase keys, exposes snake_case attributes.

    Unknown keys are ignored so new API fields never break decoding. Dump with
    ``by_alias=True`` to get a payload the same model can read back.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )
