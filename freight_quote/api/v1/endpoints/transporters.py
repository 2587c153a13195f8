"""Transporter/Carrier lookup API endpoints."""
from typing import Optional
import uuid

from fastapi import APIRouter, HTTPException, status, Query
from fastapi.responses import JSONResponse
from sqlalchemy import select

from freight_quote.api.deps import DB
from freight_quote.models.transporter import Transporter
from freight_quote.schemas.transporter import TransporterResponse, TransporterListResponse


router = APIRouter()

SEARCH_LIMIT = 10


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


@router.get("/search", response_model=list[str])
async def search_transporters(
    db: DB,
    search: Optional[str] = Query(None),
):
    """Company names starting with `search`, case-insensitive."""
    if not search or not search.strip():
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=[])

    query = (
        select(Transporter.company_name)
        .where(Transporter.company_name.ilike(f"{_escape_like(search)}%", escape="\\"))
        .order_by(Transporter.company_name.asc())
        .limit(SEARCH_LIMIT)
    )
    result = await db.execute(query)
    return list(result.scalars().all())


@router.get("/all", response_model=TransporterListResponse)
async def list_all_transporters(db: DB):
    """Get all transporters, without their service tables."""
    result = await db.execute(select(Transporter).order_by(Transporter.company_name.asc()))
    transporters = result.scalars().all()

    if not transporters:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No transporters found"
        )

    return TransporterListResponse(
        data=[TransporterResponse.model_validate(t) for t in transporters]
    )


@router.get("/{transporter_id}", response_model=TransporterResponse)
async def get_transporter(
    transporter_id: uuid.UUID,
    db: DB,
):
    """Get transporter by ID."""
    query = select(Transporter).where(Transporter.id == transporter_id)
    result = await db.execute(query)
    transporter = result.scalar_one_or_none()

    if not transporter:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Transporter not found"
        )

    return TransporterResponse.model_validate(transporter)
