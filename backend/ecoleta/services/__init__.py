"""
Ecoleta Backend — Services Layer
=================================

Service Inventory:
    - LocationService: location queries and the creation transaction
    - ItemService:     read-only item catalogue
    - FileService:     upload validation, storage, serving and cleanup

Services receive the database session as an argument on every call and
keep no per-request state, so each has a single module-level instance.
"""
