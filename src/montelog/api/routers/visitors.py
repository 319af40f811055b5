"""Visitor counting endpoints.

A client counts once per UTC day; repeat visits are absorbed by the
visitor gate in the cache before they reach the database.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from montelog.api.deps import ClientKey, get_visitor_service
from montelog.models import VisitorStats
from montelog.services import VisitorService

router = APIRouter(prefix="/visitor", tags=["visitors"])


@router.post("", status_code=status.HTTP_204_NO_CONTENT)
async def record_visit(
    user_key: ClientKey,
    visitors: VisitorService = Depends(get_visitor_service),
) -> None:
    await visitors.record_visit(user_key)


@router.get("/stats", response_model=VisitorStats, response_model_by_alias=True)
async def visitor_stats(
    visitors: VisitorService = Depends(get_visitor_service),
) -> VisitorStats:
    return await visitors.get_stats()
