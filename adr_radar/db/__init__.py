"""Database Infrastructure — SQLAlchemy Base and async session factory.

Invariants:
    - Single async engine per process (owned by DatabaseSessionManager)
    - All sessions are async (AsyncSession)

Design Decisions:
    - aiosqlite driver for SQLite: the index is a local file next to the Markdown store
"""
