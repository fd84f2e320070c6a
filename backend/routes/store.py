from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from backend import repositories
from backend.auth import ensure_owned_path, require_user_id
from backend.schemas import NodeResponse, NodeValue, OkResponse, PushResponse, RevisionResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def _checked_path(user_id: str, path: str) -> str:
    try:
        clean = repositories.normalize_path(path)
    except repositories.InvalidPath as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    ensure_owned_path(user_id, clean)
    return clean


@router.get("/v1/store/revision/{path:path}", response_model=RevisionResponse)
async def get_revision(path: str, user_id: str = Depends(require_user_id)):
    clean = _checked_path(user_id, path)
    revision = await repositories.get_revision(clean)
    return {"path": clean, "revision": revision}


@router.get("/v1/store/{path:path}", response_model=NodeResponse)
async def read_node(
    path: str,
    order_by: str | None = Query(default=None),
    equal_to: str | None = Query(default=None),
    user_id: str = Depends(require_user_id),
):
    clean = _checked_path(user_id, path)
    if order_by is not None and equal_to is None:
        raise HTTPException(status_code=400, detail="equal_to is required with order_by")
    value = await repositories.read_node(clean, order_by=order_by, equal_to=equal_to)
    return {"path": clean, "value": value}


@router.put("/v1/store/{path:path}", response_model=OkResponse)
async def write_node(path: str, payload: NodeValue, user_id: str = Depends(require_user_id)):
    clean = _checked_path(user_id, path)
    await repositories.write_node(clean, payload.value)
    logger.debug("Wrote %s", clean)
    return {"ok": True}


@router.post("/v1/store/{path:path}", response_model=PushResponse)
async def push_node(path: str, payload: NodeValue, user_id: str = Depends(require_user_id)):
    clean = _checked_path(user_id, path)
    if payload.value is None:
        raise HTTPException(status_code=400, detail="Cannot push an empty value")
    key = await repositories.push_node(clean, payload.value)
    return {"path": clean, "key": key}


@router.delete("/v1/store/{path:path}", response_model=OkResponse)
async def delete_node(path: str, user_id: str = Depends(require_user_id)):
    clean = _checked_path(user_id, path)
    await repositories.delete_node(clean)
    return {"ok": True}
