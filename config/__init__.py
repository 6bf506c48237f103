"""
پکیج config:
این پکیج شامل تنظیمات و پیکربندی‌های مورد نیاز پروژه است.
"""

from .settings import (
    BASE_DIR,
    CONFIG_DIR,
    LOGS_DIR,
    DB_CONFIG,
    LOG_CONFIG,
    CRAWLER_CONFIG,
    CLASSIFIER_CONFIG,
    get_user_agent_list,
    get_connection_string,
)

__all__ = [
    "BASE_DIR",
    "CONFIG_DIR",
    "LOGS_DIR",
    "DB_CONFIG",
    "LOG_CONFIG",
    "CRAWLER_CONFIG",
    "CLASSIFIER_CONFIG",
    "get_user_agent_list",
    "get_connection_string",
]
