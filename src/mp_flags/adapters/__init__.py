"""Adapters – SQLAlchemy storage and the FastAPI HTTP boundary."""
