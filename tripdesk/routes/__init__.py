# Routes package init
"""
TripDesk Backend — API Routes Package
=======================================

Route Inventory:
    - registrations.py: POST /api/registrations          (public form)
    - admin.py:         POST /api/admin/login | /logout
                        GET  /api/admin/me
                        GET/PUT/DELETE /api/admin/registrations[/{id}]
    - health.py:        GET  /health

Routes stay thin: read the request, call a service, shape the response.
Failures are raised as TripDeskError subclasses and turned into
{"message": ...} bodies by the handlers in main.py.
"""
