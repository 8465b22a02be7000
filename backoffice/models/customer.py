"""Customer model.

Back office customers. Read-only from the warranty module: tickets only
check that a referenced customer exists and embed it in detail responses.
"""

from datetime import datetime

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from backoffice.stores.postgres import Base


class Customer(Base):
    """Customer of the shop."""

    __tablename__ = "customers"

    id: Mapped[int] = mapped_column(primary_key=True)

    # Public customer code (e.g., "KH000123")
    code: Mapped[str] = mapped_column(String(50), unique=True, index=True)
    name: Mapped[str] = mapped_column(String(200))
    phone: Mapped[str | None] = mapped_column(String(30), index=True)
    email: Mapped[str | None] = mapped_column(String(200))
    address: Mapped[str | None] = mapped_column(String(500))

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    def __repr__(self) -> str:
        return f"<Customer {self.code}>"
