from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel


class NodeValue(BaseModel):
    value: Any = None


class NodeResponse(BaseModel):
    path: str
    value: Optional[Any] = None


class PushResponse(BaseModel):
    path: str
    key: str


class RevisionResponse(BaseModel):
    path: str
    revision: int


class OkResponse(BaseModel):
    ok: bool = True
