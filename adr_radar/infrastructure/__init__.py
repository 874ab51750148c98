"""Infrastructure Layer — database, filesystem and logging adapters.

Invariants:
    - Adapters implement the Protocols in core/repository_protocols.py
    - Library exceptions are mapped to RadarError subclasses at this boundary

Design Decisions:
    - One adapter per external resource (ADR: single responsibility)
"""
