"""Warranty ticket endpoints.

POST   /v1/warranties             -> create (code generated when omitted)
GET    /v1/warranties             -> list, filtered by query string
GET    /v1/warranties/summary     -> counts per status
GET    /v1/warranties/code/{code} -> get by ticket code
GET    /v1/warranties/{id}        -> get by id
PATCH  /v1/warranties/{id}        -> partial update
DELETE /v1/warranties/{id}        -> hard delete

Routers are thin: call services for business logic. WarrantyError raised by
the service is rendered by the app-level exception handler.
"""

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.schemas import (
    WarrantyCreate,
    WarrantyDetail,
    WarrantyFilter,
    WarrantyRead,
    WarrantyStatusSummary,
    WarrantyUpdate,
)
from backoffice.services.warranties import WarrantyService
from backoffice.stores.postgres import get_db_session

router = APIRouter()


def get_warranty_service(session: AsyncSession = Depends(get_db_session)) -> WarrantyService:
    return WarrantyService(session)


@router.post("", response_model=WarrantyRead, status_code=201)
async def create_warranty(
    request: WarrantyCreate,
    service: WarrantyService = Depends(get_warranty_service),
) -> WarrantyRead:
    """Open a new warranty ticket."""
    warranty = await service.create(request)
    return WarrantyRead.model_validate(warranty)


@router.get("", response_model=list[WarrantyDetail])
async def list_warranties(
    code: str | None = Query(default=None, description="Code substring (case-insensitive)"),
    customer_id: str | None = Query(default=None, alias="customerId"),
    product_id: str | None = Query(default=None, alias="productId"),
    invoice_id: str | None = Query(default=None, alias="invoiceId"),
    technician_id: str | None = Query(default=None, alias="technicianId"),
    creator_id: str | None = Query(default=None, alias="creatorId"),
    serial_number: str | None = Query(
        default=None,
        alias="serialNumber",
        description="Serial number substring (case-insensitive)",
    ),
    status: str | None = Query(
        default=None,
        description="PENDING, PROCESSING, COMPLETED or REJECTED (any case)",
    ),
    start_date: str | None = Query(
        default=None,
        alias="startDate",
        description="Earliest received date (ISO-8601, inclusive)",
        examples=["2026-10-01"],
    ),
    end_date: str | None = Query(
        default=None,
        alias="endDate",
        description="Latest received date (ISO-8601, inclusive)",
        examples=["2026-10-31T23:59:59"],
    ),
    service: WarrantyService = Depends(get_warranty_service),
) -> list[WarrantyDetail]:
    """List tickets, most recently received first."""
    filters = WarrantyFilter(
        code=code,
        customer_id=customer_id,
        product_id=product_id,
        invoice_id=invoice_id,
        technician_id=technician_id,
        creator_id=creator_id,
        serial_number=serial_number,
        status=status,
        start_date=start_date,
        end_date=end_date,
    )
    warranties = await service.find_all(filters)
    return [WarrantyDetail.model_validate(w) for w in warranties]


@router.get("/summary", response_model=WarrantyStatusSummary)
async def get_status_summary(
    service: WarrantyService = Depends(get_warranty_service),
) -> WarrantyStatusSummary:
    """Ticket counts per status for the dashboard."""
    counts = await service.status_summary()
    return WarrantyStatusSummary(**counts)


@router.get("/code/{code}", response_model=WarrantyDetail)
async def get_warranty_by_code(
    code: str = Path(description="Ticket code", min_length=1, max_length=50),
    service: WarrantyService = Depends(get_warranty_service),
) -> WarrantyDetail:
    warranty = await service.find_by_code(code)
    return WarrantyDetail.model_validate(warranty)


@router.get("/{warranty_id}", response_model=WarrantyDetail)
async def get_warranty(
    warranty_id: int,
    service: WarrantyService = Depends(get_warranty_service),
) -> WarrantyDetail:
    warranty = await service.find_one(warranty_id)
    return WarrantyDetail.model_validate(warranty)


@router.patch("/{warranty_id}", response_model=WarrantyRead)
async def update_warranty(
    request: WarrantyUpdate,
    warranty_id: int,
    service: WarrantyService = Depends(get_warranty_service),
) -> WarrantyRead:
    """Update a ticket. Setting status COMPLETED stamps actualReturnDate if omitted."""
    warranty = await service.update(warranty_id, request)
    return WarrantyRead.model_validate(warranty)


@router.delete("/{warranty_id}", response_model=WarrantyRead)
async def delete_warranty(
    warranty_id: int,
    service: WarrantyService = Depends(get_warranty_service),
) -> WarrantyRead:
    """Delete a ticket and return the deleted record."""
    warranty = await service.remove(warranty_id)
    return WarrantyRead.model_validate(warranty)
