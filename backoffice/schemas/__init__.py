"""Pydantic schemas for API request/response validation."""

from backoffice.schemas.common import ErrorDetail, ErrorResponse
from backoffice.schemas.warranty import (
    CustomerOut,
    InvoiceOut,
    ProductOut,
    UserSummary,
    WarrantyCreate,
    WarrantyDetail,
    WarrantyFilter,
    WarrantyRead,
    WarrantyStatusSummary,
    WarrantyUpdate,
)

__all__ = [
    "ErrorDetail",
    "ErrorResponse",
    "CustomerOut",
    "InvoiceOut",
    "ProductOut",
    "UserSummary",
    "WarrantyCreate",
    "WarrantyDetail",
    "WarrantyFilter",
    "WarrantyRead",
    "WarrantyStatusSummary",
    "WarrantyUpdate",
]
