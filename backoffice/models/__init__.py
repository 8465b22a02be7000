"""SQLAlchemy ORM models.

Models represent database tables:
- warranties: Warranty / repair tickets
- customers: Shop customers
- products: Catalog products
- invoices: Sales invoices
- users: Staff accounts (ticket creators and technicians)
"""

from backoffice.models.customer import Customer
from backoffice.models.invoice import Invoice
from backoffice.models.product import Product
from backoffice.models.user import User
from backoffice.models.warranty import Warranty

__all__ = ["Customer", "Invoice", "Product", "User", "Warranty"]
