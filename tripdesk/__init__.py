"""
TripDesk Backend — Application Package
========================================

What: Travel registration service: a public form endpoint plus a
      session-protected admin API over the stored registrations.

Layering:

    ┌─────────────────────────────────────┐
    │   routes/        HTTP + cookies     │
    ├─────────────────────────────────────┤
    │   services/      validation, auth,  │
    │                  sessions, storage  │
    ├─────────────────────────────────────┤
    │   models/ schemas/  ORM + API shape │
    ├─────────────────────────────────────┤
    │   database.py schema.py migrations/ │
    └─────────────────────────────────────┘

Entry point: tripdesk.main:app (or the `tripdesk` console script).
"""

__version__ = "1.0.0"
