#!/usr/bin/env python3
"""Seed database with reference data for local development.

Creates:
- Staff users (ticket creators / technicians)
- Customers
- Products
- Invoices

Warranty tickets themselves are created through the API so codes go through
the normal generator.

Seed script is idempotent (looks records up by their unique key first).

Usage:
    python -m scripts.seed
"""

import asyncio
import os
import sys

# Add parent to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from backoffice.models import Customer, Invoice, Product, User
from backoffice.settings import get_settings

load_dotenv()

USERS = [
    {"name": "Admin", "email": "admin@example.com"},
    {"name": "Front Desk", "email": "frontdesk@example.com"},
    {"name": "Technician One", "email": "tech1@example.com"},
    {"name": "Technician Two", "email": "tech2@example.com"},
]

CUSTOMERS = [
    {"code": "KH000001", "name": "Nguyen Van An", "phone": "0901000001", "email": "an@example.com"},
    {"code": "KH000002", "name": "Tran Thi Binh", "phone": "0901000002", "email": None},
    {"code": "KH000003", "name": "Le Hoang Cuong", "phone": "0901000003", "email": "cuong@example.com"},
]

PRODUCTS = [
    {"code": "SP000001", "name": "Laptop 14 inch", "warranty_months": 24},
    {"code": "SP000002", "name": "Wireless Mouse", "warranty_months": 12},
    {"code": "SP000003", "name": "27 inch Monitor", "warranty_months": 36},
]

# Invoices reference customers by code
INVOICES = [
    {"code": "HD000001", "customer": "KH000001", "total_amount": 18990000},
    {"code": "HD000002", "customer": "KH000002", "total_amount": 450000},
]


async def seed_database() -> None:
    """Main seed function."""
    settings = get_settings()
    print(f"Connecting to database: {settings.async_database_url[:50]}...")

    engine = create_async_engine(settings.async_database_url, echo=False)
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    try:
        async with session_factory() as session:
            print("\nSeeding users...")
            await seed_users(session)

            print("\nSeeding customers...")
            customer_map = await seed_customers(session)

            print("\nSeeding products...")
            await seed_products(session)

            print("\nSeeding invoices...")
            await seed_invoices(session, customer_map)

            await session.commit()
            print("\nSeed completed")
    finally:
        await engine.dispose()


async def seed_users(session: AsyncSession) -> None:
    for u in USERS:
        result = await session.execute(select(User).where(User.email == u["email"]))
        if result.scalar_one_or_none():
            print(f"  - {u['email']} (exists)")
            continue
        session.add(User(name=u["name"], email=u["email"]))
        print(f"  + {u['email']}")


async def seed_customers(session: AsyncSession) -> dict[str, int]:
    """Seed customers and return code -> id."""
    customer_map: dict[str, int] = {}
    for c in CUSTOMERS:
        result = await session.execute(select(Customer).where(Customer.code == c["code"]))
        existing = result.scalar_one_or_none()
        if existing:
            customer_map[c["code"]] = existing.id
            print(f"  - {c['code']} (exists)")
            continue
        customer = Customer(code=c["code"], name=c["name"], phone=c["phone"], email=c["email"])
        session.add(customer)
        await session.flush()
        customer_map[c["code"]] = customer.id
        print(f"  + {c['code']} {c['name']}")
    return customer_map


async def seed_products(session: AsyncSession) -> None:
    for p in PRODUCTS:
        result = await session.execute(select(Product).where(Product.code == p["code"]))
        if result.scalar_one_or_none():
            print(f"  - {p['code']} (exists)")
            continue
        session.add(Product(code=p["code"], name=p["name"], warranty_months=p["warranty_months"]))
        print(f"  + {p['code']} {p['name']}")


async def seed_invoices(session: AsyncSession, customer_map: dict[str, int]) -> None:
    for inv in INVOICES:
        result = await session.execute(select(Invoice).where(Invoice.code == inv["code"]))
        if result.scalar_one_or_none():
            print(f"  - {inv['code']} (exists)")
            continue
        customer_id = customer_map.get(inv["customer"])
        if not customer_id:
            print(f"  ! customer not found: {inv['customer']}")
            continue
        session.add(
            Invoice(code=inv["code"], customer_id=customer_id, total_amount=inv["total_amount"])
        )
        print(f"  + {inv['code']}")


if __name__ == "__main__":
    asyncio.run(seed_database())
