from .database import DB, Base, backup_db, db, db_wrapper, delete, filter_by, select, test_db


__all__ = [
    "Base",
    "DB",
    "backup_db",
    "db",
    "db_wrapper",
    "delete",
    "filter_by",
    "select",
    "test_db",
]
