"""adr-radar — Architectural Decision Records and a live Tech Radar in the terminal.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)

Design Decisions:
    - Empty __init__.py: explicit imports only, no star exports
"""
