"""
CityGuide Backend — Middleware Package
========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [Request ID] → [Rate Limit] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID first, so even a rate-limited 429 carries a requestId
    2. Rate Limit rejects abusive clients before any database work
    3. Logging records method, path, status and duration per request

Responses pass back through the chain in reverse order; the request ID is
added to the response headers on the way out.
"""
