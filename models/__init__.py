"""Persistence layer: SQLAlchemy models, stores and DBStorage."""
