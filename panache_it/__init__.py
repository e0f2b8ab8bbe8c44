"""Integration suite for active-record entity serialization over FastAPI and SQLAlchemy."""

__version__ = "0.1.0"
