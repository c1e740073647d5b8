"""Local contacts -- persistence model, schemas, repository and lifecycle service.

Provides ContactModel (SQLAlchemy), the Pydantic contact schemas,
ContactRepository for async CRUD, and ContactService which runs the sync
triggers around inserts and updates.
"""
