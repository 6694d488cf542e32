"""Pydantic Schemas — request/response validation for API endpoints.

Invariants:
    - Schemas validate shape at the system boundary; domain rules stay in core/
    - Domain enums from core/ used for enum fields in responses

Design Decisions:
    - Separate from core values: schemas are API contracts, core dataclasses are state
"""
