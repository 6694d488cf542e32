"""API Layer — FastAPI routes, dependencies and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - All endpoints return structured JSON or SSE

Design Decisions:
    - Thin routes delegate to services; no state lives in this package
"""
