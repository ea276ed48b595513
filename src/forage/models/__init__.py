# Copyright (c) Syntropy Systems
"""Pydantic models shared across forage."""

from .base import ForageBaseModel, JSONObject, JSONValue
from .process import ObjFuncChildResult, ProcessDiagnostics

__all__ = [
    "ForageBaseModel",
    "JSONObject",
    "JSONValue",
    "ObjFuncChildResult",
    "ProcessDiagnostics",
]
