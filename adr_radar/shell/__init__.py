"""Terminal Shell — key reading, rendering and the event loop.

Invariants:
    - Render functions only read SessionState
    - All state changes go through core.transitions
"""
