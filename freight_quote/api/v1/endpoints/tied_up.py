"""Tied-up transporter API endpoints."""
import uuid

from fastapi import APIRouter, HTTPException, Query, Response, status

from freight_quote.api.deps import DB
from freight_quote.schemas.tied_up import (
    TemporaryTransporterResponse,
    TiedUpCompanyCreate,
    TiedUpCompanyResponse,
    TiedUpCreateResult,
    TiedUpListResponse,
)
from freight_quote.services.tied_up_service import TiedUpNotFoundError, TiedUpService


router = APIRouter()


@router.post(
    "/tied-up",
    response_model=TiedUpCreateResult,
    responses={201: {"model": TiedUpCreateResult, "description": "Company added for verification"}},
)
async def add_tied_up_company(
    data: TiedUpCompanyCreate,
    db: DB,
    response: Response,
):
    """
    Register a negotiated price list with a transporter.

    Unlisted companies are held for verification and answered with 201.
    """
    service = TiedUpService(db)
    try:
        created, record = await service.add_tied_up_company(data)
    except TiedUpNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    await db.commit()
    await db.refresh(record)

    if not created:
        response.status_code = status.HTTP_201_CREATED
        return TiedUpCreateResult(
            message="Company added for verification",
            pending=TemporaryTransporterResponse.model_validate(record),
        )

    return TiedUpCreateResult(
        message="Tied up company added successfully",
        tied_up=TiedUpCompanyResponse.model_validate(record),
    )


@router.get("/tied-up", response_model=TiedUpListResponse)
async def get_tied_up_companies(
    db: DB,
    customer_id: uuid.UUID = Query(...),
):
    """Get a customer's tied-up transporters."""
    tied_ups = await TiedUpService(db).list_tied_up_companies(customer_id)
    return TiedUpListResponse(
        data=[TiedUpCompanyResponse.model_validate(t) for t in tied_ups]
    )


@router.delete("/tied-up")
async def remove_tied_up_company(
    db: DB,
    customer_id: uuid.UUID = Query(...),
    transporter_id: uuid.UUID = Query(...),
):
    """Remove a tie-up."""
    try:
        await TiedUpService(db).remove_tied_up_company(customer_id, transporter_id)
    except TiedUpNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    await db.commit()
    return {"success": True, "message": "Tied up company removed successfully"}


@router.get("/temporary", response_model=list[TemporaryTransporterResponse])
async def get_temporary_transporters(
    db: DB,
    customer_id: uuid.UUID = Query(...),
):
    """Get a customer's tie-ups awaiting company verification."""
    temporary = await TiedUpService(db).list_temporary_transporters(customer_id)
    return [TemporaryTransporterResponse.model_validate(t) for t in temporary]
