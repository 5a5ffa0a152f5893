"""
CityGuide Backend — Application Package Initializer
====================================================

What: Marks the `cityguide` directory as a Python package.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    The backend is layered:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, auth dependencies
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Workflows, aggregation, ownership gate
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Services never import FastAPI. Every core operation (review append, owner
    reply, submission and update moderation) checks its own preconditions so it
    behaves the same when called from a route, a test, or a maintenance script.
"""

__version__ = "1.0.0"
