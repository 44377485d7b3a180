"""
Gestor de Expedientes Backend: Application Package
===================================================

What: Case-file ("expediente") records service for a court office.
Who:  Imported by uvicorn, Alembic and pytest.

Architecture Note:
    The backend is split in layers:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │      Services (Access Scoping)      │  ← Role branching, uniqueness rules
    ├─────────────────────────────────────┤
    │   Repositories (CaseStore, Users)   │  ← Query/save/delete contracts
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Services only talk to the repository interfaces, so they can be driven
    by in-memory stores in tests.
"""

__version__ = "1.0.0"
