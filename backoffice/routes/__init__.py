"""API routes."""

from fastapi import APIRouter

from backoffice.routes import warranties

api_router = APIRouter()

# Warranty tickets (CRUD, dashboard summary)
api_router.include_router(warranties.router, prefix="/v1/warranties", tags=["warranties"])
