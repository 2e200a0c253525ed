"""SQLAlchemy adapter – data provider over ``select()`` statements."""
from grid_export.adapters.sqlalchemy.provider import SqlAlchemyDataProvider

__all__ = ["SqlAlchemyDataProvider"]
