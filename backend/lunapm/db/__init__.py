"""Database package."""

from lunapm.db.base import Base, BaseModel
from lunapm.db.session import DBSession, get_db_session

__all__ = ["Base", "BaseModel", "DBSession", "get_db_session"]
