# Copyright (c) Syntropy Systems
"""Base model and JSON aliases for candidate values and process output."""

from __future__ import annotations

from typing import ClassVar

from pydantic import BaseModel, ConfigDict, JsonValue
from typing_extensions import TypeAlias

# Anything json.dumps can send to an objective program
JSONValue: TypeAlias = JsonValue
JSONObject: TypeAlias = dict[str, JSONValue]


class ForageBaseModel(BaseModel):
    """Lenient base: unknown keys are dropped, fields fill by name or alias."""

    model_config: ClassVar[ConfigDict] = ConfigDict(
        extra="ignore",
        populate_by_name=True,
    )
