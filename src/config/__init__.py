from .settings import settings
from .database import async_session_maker, async_session_manager, engine, run_transaction
from .table_names import TableNames

__all__ = [
    "settings",
    "engine",
    "async_session_maker",
    "async_session_manager",
    "run_transaction",
    "TableNames",
]
