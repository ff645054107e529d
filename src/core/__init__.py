from src.core.config import settings
from src.core.database import AsyncSessionDep, get_db, unit_of_work

__all__ = ["settings", "get_db", "unit_of_work", "AsyncSessionDep"]
