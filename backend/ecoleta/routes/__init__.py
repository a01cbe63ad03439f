"""
Ecoleta Backend — API Routes Package
=====================================

Route Inventory:
    - locations.py: GET/POST /locations, GET/PUT /locations/{id}
    - items.py:     GET /items
    - uploads.py:   GET /uploads/{filename}
    - projects.py:  GET/POST/PUT/DELETE /projects
    - health.py:    GET /health

Routes stay thin: they pull data out of the request, call a service with
the request's AsyncSession, and return the service's response model.
"""
