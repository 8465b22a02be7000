"""Warranty model.

A warranty ticket tracks a customer's product repair request from intake to
return. Tickets carry a human-readable code (WR-YYYYMMDD-NNNN) that is unique
across all tickets and never changes after creation.
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backoffice.models.customer import Customer
from backoffice.models.invoice import Invoice
from backoffice.models.product import Product
from backoffice.models.user import User
from backoffice.services.warranty_status import DEFAULT_STATUS, WarrantyStatus
from backoffice.stores.postgres import Base


class Warranty(Base):
    """Warranty / repair ticket."""

    __tablename__ = "warranties"

    id: Mapped[int] = mapped_column(primary_key=True)

    # Public ticket code (e.g., "WR-20261019-0006")
    code: Mapped[str] = mapped_column(String(50), unique=True, index=True)

    # References validated at creation time
    customer_id: Mapped[int | None] = mapped_column(ForeignKey("customers.id"), index=True)
    product_id: Mapped[int | None] = mapped_column(ForeignKey("products.id"), index=True)
    invoice_id: Mapped[int | None] = mapped_column(ForeignKey("invoices.id"), index=True)

    # Staff references (not validated by the service)
    creator_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    technician_id: Mapped[int | None] = mapped_column(ForeignKey("users.id"), index=True)

    # Device & issue
    serial_number: Mapped[str | None] = mapped_column(String(100), index=True)
    issue_description: Mapped[str | None] = mapped_column(Text)
    diagnosis: Mapped[str | None] = mapped_column(Text)
    solution: Mapped[str | None] = mapped_column(Text)
    notes: Mapped[str | None] = mapped_column(Text)

    # Lifecycle
    status: Mapped[WarrantyStatus] = mapped_column(
        Enum(WarrantyStatus, name="warranty_status"),
        default=DEFAULT_STATUS,
        index=True,
    )
    received_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
    expected_return_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    actual_return_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Billing
    cost: Mapped[float | None] = mapped_column()
    charged: Mapped[bool] = mapped_column(Boolean, default=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    # Relations (loaded explicitly by the service)
    customer: Mapped[Customer | None] = relationship()
    product: Mapped[Product | None] = relationship()
    invoice: Mapped[Invoice | None] = relationship()
    creator: Mapped[User] = relationship(foreign_keys=[creator_id])
    technician: Mapped[User | None] = relationship(foreign_keys=[technician_id])

    def __repr__(self) -> str:
        return f"<Warranty {self.code} ({self.status.value})>"
