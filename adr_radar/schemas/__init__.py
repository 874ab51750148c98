"""Pydantic Schemas — request/response validation for API endpoints.

Invariants:
    - Schemas validate at the system boundary
    - Domain enums from core/ used for classification fields

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
"""
