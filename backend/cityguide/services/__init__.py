# Services package init
"""
CityGuide Backend — Services Layer
====================================

What:  Business rules between the routes (HTTP) and the models (persistence).
How:   Each service takes the request's AsyncSession, loads what it needs,
       applies its rules and flushes. The request dependency commits.

Service Inventory:
    - token_service:       issue/verify bearer tokens (PyJWT)
    - auth_service:        register, login, token → user
    - authorization:       owner/admin predicates and ensure_* guards
    - place_service:       list, search, detail, cities, delete
    - review_service:      review aggregate rules and persistence
    - favorite_service:    per-user favorites
    - moderation:          pending → approved | rejected state machine
    - submission_service:  place submissions and the approval saga
    - update_service:      owner update requests and applying approved diffs
    - admin_service:       user moderation and dashboard counters
    - file_service:        image upload validation, storage and serving

The rules that need no database (review statistics, update diffs, the
moderation transitions) are plain functions so they can be tested on
in-memory objects.
"""
