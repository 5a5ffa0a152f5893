"""
CityGuide Backend — Pydantic Request/Response Schemas
======================================================

What:  The API contract between clients and the backend.
How:   All schemas inherit CamelModel (schemas.common), so Python code uses
       snake_case while JSON uses camelCase. Responses are wrapped in
       ApiResponse[T].

Schemas are separate from the SQLAlchemy models: the wire format decides which
fields are exposed (password hashes never are), and request validation rules
differ from database constraints.
"""
