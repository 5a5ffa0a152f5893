"""
CityGuide Backend — API Routes Package
========================================

What:  HTTP route handlers, one module per resource.

Route Inventory:
    - health.py:       GET  /api/health
    - auth.py:         /api/auth/register, /api/auth/login, /api/auth/me
    - places.py:       /api/cities, /api/places[/search|/{id}[/reviews[/{rid}/reply]]]
    - favorites.py:    /api/favorites[/{favoriteId}]
    - submissions.py:  /api/submissions[/my|/cities]
    - my_places.py:    /api/my-places[/{id}], /api/my-updates
    - uploads.py:      POST /api/upload-image, GET /uploads/{path}
    - admin.py:        /api/admin/...

Routes stay thin: read the request, call a service, wrap the result in
ApiResponse. Authorization that depends only on the caller lives in
dependencies.py; authorization that depends on the target place lives in the
services.
"""
