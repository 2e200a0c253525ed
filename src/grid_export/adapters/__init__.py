"""Adapters – framework and storage integrations (FastAPI, SQLAlchemy)."""
