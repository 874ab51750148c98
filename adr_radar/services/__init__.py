"""Services Layer — Sync Protocol and the interactive session controller.

Invariants:
    - Services orchestrate IO around pure core decisions
    - Services depend on Protocols, never on concrete adapters

Design Decisions:
    - Constructor injection of store and writer: tests pass fakes directly
"""
