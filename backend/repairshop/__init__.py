"""
Repair Shop Backend — Application Package Initializer
=====================================================

What: Marks the `repairshop` directory as a Python package.
Who:  Imported by uvicorn (`uvicorn repairshop.main:app`), Alembic and pytest.

Architecture Note:
    The backend is split into layers:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │    Validation (declarative rules)   │  ← Field-level request checks
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Uniqueness checks, writes
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async session per request
    └─────────────────────────────────────┘

    Routes stay thin and delegate to services; services can be exercised
    with a bare AsyncSession and no HTTP stack.
"""

__version__ = "1.0.0"
