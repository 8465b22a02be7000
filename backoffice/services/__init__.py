"""Warranty business logic.

- warranty_status: status enum and status-driven side effects
- warranties: code generation, reference checks, filters, WarrantyService

Routes build a WarrantyService per request; the clock is injectable for tests.
"""
