"""Core Layer — pure domain logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, db/ or shell/
    - All functions are pure and deterministic (the clock arrives as Tick events)

Design Decisions:
    - Functional core separated from imperative shell: the session controller runs
      effects, core only decides them
"""
