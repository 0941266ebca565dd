# Services package init
"""
TripDesk Backend — Services Layer
===================================

Service Inventory:
    - validation:    registration payload rules and field mapping
    - repository:    registrations and admins over the async engine
    - session_store: SessionStore interface + in-memory implementation
    - auth_service:  bcrypt hashing, login/logout, signed session cookie

Services raise TripDeskError subclasses; they never build HTTP responses.
"""
