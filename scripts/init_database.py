#!/usr/bin/env python
"""
اسکریپت راه‌اندازی اولیه پایگاه داده برای خزشگر کتابخانه متون

این اسکریپت جداول پایگاه داده را ایجاد، حذف یا بازسازی می‌کند و وضعیت
جداول موجود را نمایش می‌دهد.
"""

import os
import sys
import argparse
from dotenv import load_dotenv
from sqlalchemy.exc import SQLAlchemyError

# افزودن مسیر پروژه به سیستم
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# بارگذاری متغیرهای محیطی
load_dotenv()

from utils.logger import get_logger
from database.connection import DatabaseConnection
from database.operations import BaseDBOperations
from database.schema import create_tables, drop_tables, recreate_tables, existing_tables, table_names
from models import Author, Book, Chapter, Segment, ScrapingError

# تنظیم لاگر
logger = get_logger(__name__)

COUNTED_MODELS = (Author, Book, Chapter, Segment, ScrapingError)


def parse_arguments(argv=None):
    """
    پردازش آرگومان‌های خط فرمان

    Returns:
        argparse.Namespace: آرگومان‌های پردازش شده
    """
    parser = argparse.ArgumentParser(description='اسکریپت راه‌اندازی اولیه پایگاه داده')

    group = parser.add_mutually_exclusive_group()
    group.add_argument('--recreate', action='store_true',
                       help='حذف و ایجاد مجدد تمام جداول (هشدار: تمام داده‌ها حذف می‌شوند)')
    group.add_argument('--drop', action='store_true',
                       help='فقط حذف تمام جداول (هشدار: تمام داده‌ها حذف می‌شوند)')

    parser.add_argument('--status', action='store_true',
                        help='نمایش جداول موجود و تعداد رکوردهای هر جدول')

    return parser.parse_args(argv)


def init_database(recreate=False, drop=False):
    """
    ایجاد جداول پایگاه داده

    Args:
        recreate: آیا جداول حذف و دوباره ایجاد شوند؟
        drop: آیا فقط جداول حذف شوند؟

    Returns:
        bool: آیا عملیات موفق بود؟
    """
    try:
        db_conn = DatabaseConnection()
    except SQLAlchemyError as e:
        logger.error(f"خطا در راه‌اندازی پایگاه داده: {str(e)}")
        return False

    if drop:
        logger.warning("در حال حذف تمام جداول...")
        return drop_tables(db_conn)

    if recreate:
        logger.warning("در حال بازسازی تمام جداول...")
        return recreate_tables(db_conn)

    logger.info("در حال ایجاد جداول...")
    return create_tables(db_conn)


def show_status():
    """نمایش جداول موجود و تعداد رکوردها"""
    db_conn = DatabaseConnection()
    present = set(existing_tables(db_conn))
    missing = [name for name in table_names() if name not in present]
    if missing:
        logger.warning(f"جداول ایجادنشده: {', '.join(missing)}")

    db_ops = BaseDBOperations(db_conn)
    for model_class in COUNTED_MODELS:
        if model_class.__tablename__ in present:
            logger.info(f"{model_class.__tablename__}: {db_ops.count(model_class)} رکورد")


def main(argv=None):
    """تابع اصلی برنامه"""
    args = parse_arguments(argv)

    if args.drop:
        success = init_database(drop=True)
    elif args.recreate:
        success = init_database(recreate=True)
    else:
        success = init_database()

    if success and args.status:
        show_status()

    return 0 if success else 1


# اجرای برنامه در صورت فراخوانی مستقیم
if __name__ == '__main__':
    sys.exit(main())
