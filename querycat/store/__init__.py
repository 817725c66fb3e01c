from .base import StoreHandle
from .mongo import MongoStore

__all__ = ["MongoStore", "StoreHandle"]
