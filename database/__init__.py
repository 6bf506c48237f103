"""
پکیج database:
این پکیج شامل ماژول‌های مدیریت اتصال، عملیات پایگاه داده و مدیریت ساختار جداول است.
"""

from .connection import DatabaseConnection, Base
from .operations import BaseDBOperations
from .schema import create_tables, drop_tables, recreate_tables, existing_tables, table_names

__all__ = [
    "DatabaseConnection",
    "Base",
    "BaseDBOperations",
    "create_tables",
    "drop_tables",
    "recreate_tables",
    "existing_tables",
    "table_names",
]
