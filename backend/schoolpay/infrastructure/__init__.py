"""Infrastructure Layer — external service clients and cross-cutting concerns.

Invariants:
    - Infrastructure implements core Protocols; services never import it
    - All external calls map transport errors into core/errors.py types

Design Decisions:
    - Thin httpx wrappers over raw clients, one per collaborator
"""
