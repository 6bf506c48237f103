"""
ماژول مدیریت ساختار جداول پایگاه داده برای خزشگر کتابخانه متون

جداول از روی مدل‌های SQLAlchemy (models/) و از طریق Base.metadata ساخته
می‌شوند تا برای MySQL و SQLite یکسان باشند.
"""

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

from utils.logger import get_logger
from database.connection import DatabaseConnection, Base

# تنظیم لاگر
logger = get_logger(__name__)


def _metadata():
    # ثبت مدل‌ها در متادیتا
    import models  # noqa: F401
    return Base.metadata


def create_tables(db=None):
    """ایجاد تمام جداول پایگاه داده"""
    engine = (db or DatabaseConnection()).get_engine()

    try:
        _metadata().create_all(engine)
        logger.info("تمام جداول با موفقیت ایجاد شدند")
        return True
    except SQLAlchemyError as e:
        logger.error(f"خطا در ایجاد جداول: {str(e)}")
        return False


def drop_tables(db=None):
    """حذف تمام جداول پایگاه داده (استفاده با احتیاط)"""
    engine = (db or DatabaseConnection()).get_engine()

    try:
        _metadata().drop_all(engine)
        logger.info("تمام جداول با موفقیت حذف شدند")
        return True
    except SQLAlchemyError as e:
        logger.error(f"خطا در حذف جداول: {str(e)}")
        return False


def recreate_tables(db=None):
    """حذف و ایجاد مجدد تمام جداول (استفاده با احتیاط)"""
    if not drop_tables(db):
        return False
    if not create_tables(db):
        return False
    logger.info("تمام جداول با موفقیت بازسازی شدند")
    return True


def existing_tables(db=None):
    """لیست جداول موجود در پایگاه داده"""
    engine = (db or DatabaseConnection()).get_engine()
    return sorted(inspect(engine).get_table_names())


def table_names():
    """لیست جداول تعریف‌شده در مدل‌ها"""
    return sorted(_metadata().tables.keys())
