# Middleware package init
"""
TripDesk Backend — Middleware Package
=======================================

Middleware Chain (outermost first):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    Request ID runs first so the access line and every handler log share
    the id; Logging wraps the rest so its duration covers the whole request.
"""
