"""Schemas for the warranty endpoints (/v1/warranties).

Wire format is camelCase; attribute names stay snake_case so payloads can be
dumped straight into the ORM model.
"""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from backoffice.services.warranty_status import WarrantyStatus


def _upper_status(v: object) -> object:
    # The admin frontend sends lowercase statuses.
    if isinstance(v, str):
        return v.strip().upper()
    return v


class WarrantyCreate(BaseModel):
    """Request body for POST /v1/warranties."""

    code: str | None = Field(default=None, max_length=50)
    customer_id: int | None = Field(alias="customerId", default=None)
    product_id: int | None = Field(alias="productId", default=None)
    invoice_id: int | None = Field(alias="invoiceId", default=None)
    serial_number: str | None = Field(alias="serialNumber", default=None, max_length=100)
    issue_description: str | None = Field(alias="issueDescription", default=None)
    received_date: datetime | None = Field(alias="receivedDate", default=None)
    expected_return_date: datetime | None = Field(alias="expectedReturnDate", default=None)
    status: WarrantyStatus | None = None
    diagnosis: str | None = None
    solution: str | None = None
    cost: float | None = Field(default=None, ge=0)
    charged: bool | None = None
    notes: str | None = None
    creator_id: int = Field(alias="creatorId")
    technician_id: int | None = Field(alias="technicianId", default=None)

    model_config = {"populate_by_name": True}

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, v: object) -> object:
        return _upper_status(v)


class WarrantyUpdate(BaseModel):
    """Request body for PATCH /v1/warranties/{id}.

    Only fields present in the request are applied. The ticket code cannot be
    changed.
    """

    customer_id: int | None = Field(alias="customerId", default=None)
    product_id: int | None = Field(alias="productId", default=None)
    invoice_id: int | None = Field(alias="invoiceId", default=None)
    serial_number: str | None = Field(alias="serialNumber", default=None, max_length=100)
    issue_description: str | None = Field(alias="issueDescription", default=None)
    received_date: datetime | None = Field(alias="receivedDate", default=None)
    expected_return_date: datetime | None = Field(alias="expectedReturnDate", default=None)
    actual_return_date: datetime | None = Field(alias="actualReturnDate", default=None)
    status: WarrantyStatus | None = None
    diagnosis: str | None = None
    solution: str | None = None
    cost: float | None = Field(default=None, ge=0)
    charged: bool | None = None
    notes: str | None = None
    technician_id: int | None = Field(alias="technicianId", default=None)

    model_config = {"populate_by_name": True}

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, v: object) -> object:
        return _upper_status(v)


class WarrantyFilter(BaseModel):
    """Optional list filters.

    Ids, dates and status arrive as raw query-string values and are parsed when
    the predicate is built. Status is upper-cased here.
    """

    code: str | None = None
    customer_id: str | None = None
    product_id: str | None = None
    invoice_id: str | None = None
    technician_id: str | None = None
    creator_id: str | None = None
    serial_number: str | None = None
    status: str | None = None
    start_date: str | None = None
    end_date: str | None = None

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, v: object) -> object:
        return _upper_status(v)


class CustomerOut(BaseModel):
    id: int
    code: str
    name: str
    phone: str | None = None
    email: str | None = None
    address: str | None = None

    model_config = {"from_attributes": True}


class ProductOut(BaseModel):
    id: int
    code: str
    name: str
    warranty_months: int | None = Field(alias="warrantyMonths", default=None)

    model_config = {"from_attributes": True, "populate_by_name": True}


class InvoiceOut(BaseModel):
    id: int
    code: str
    customer_id: int | None = Field(alias="customerId", default=None)
    total_amount: float = Field(alias="totalAmount")
    invoice_date: datetime = Field(alias="invoiceDate")

    model_config = {"from_attributes": True, "populate_by_name": True}


class UserSummary(BaseModel):
    """Creator / technician as embedded in a ticket (id, name, email only)."""

    id: int
    name: str
    email: str

    model_config = {"from_attributes": True}


class WarrantyRead(BaseModel):
    """A warranty ticket without related records."""

    id: int
    code: str
    customer_id: int | None = Field(alias="customerId", default=None)
    product_id: int | None = Field(alias="productId", default=None)
    invoice_id: int | None = Field(alias="invoiceId", default=None)
    creator_id: int = Field(alias="creatorId")
    technician_id: int | None = Field(alias="technicianId", default=None)
    serial_number: str | None = Field(alias="serialNumber", default=None)
    issue_description: str | None = Field(alias="issueDescription", default=None)
    diagnosis: str | None = None
    solution: str | None = None
    notes: str | None = None
    status: WarrantyStatus
    received_date: datetime = Field(alias="receivedDate")
    expected_return_date: datetime | None = Field(alias="expectedReturnDate", default=None)
    actual_return_date: datetime | None = Field(alias="actualReturnDate", default=None)
    cost: float | None = None
    charged: bool
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")

    model_config = {"from_attributes": True, "populate_by_name": True}


class WarrantyDetail(WarrantyRead):
    """A warranty ticket with its customer, product, invoice and staff."""

    customer: CustomerOut | None = None
    product: ProductOut | None = None
    invoice: InvoiceOut | None = None
    creator: UserSummary | None = None
    technician: UserSummary | None = None


class WarrantyStatusSummary(BaseModel):
    """Ticket counts per status (dashboard card)."""

    pending: int = Field(ge=0)
    processing: int = Field(ge=0)
    completed: int = Field(ge=0)
    rejected: int = Field(ge=0)
    total: int = Field(ge=0)
