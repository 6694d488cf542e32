"""Services Layer — stateful components that own asyncio tasks and timers.

Invariants:
    - Services depend on core/ and on collaborator Protocols, never on infrastructure/
    - Each service owns its state; other components read snapshots, never write

Design Decisions:
    - One service per state machine (session, transaction) for locality
"""
