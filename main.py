#!/usr/bin/env python
"""
نقطه ورود اصلی برنامه خزشگر کتابخانه متون

این اسکریپت تنظیمات اولیه، ایجاد جداول پایگاه داده و راه‌اندازی هماهنگ‌کننده
خزش را بر عهده دارد. خزش از صفحه ریشه سایت (یا یک کتاب مشخص) آغاز می‌شود و
چون ذخیره‌سازی تکرارپذیر است، اجرای دوباره کار را از همان‌جا ادامه می‌دهد.
"""

import os
import sys
import argparse
import signal
from dotenv import load_dotenv
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

# بارگذاری متغیرهای محیطی
load_dotenv()

# افزودن مسیر پروژه به سیستم
project_root = os.path.dirname(os.path.abspath(__file__))
sys.path.append(project_root)

from config.settings import CRAWLER_CONFIG
from core.crawler import LibraryCrawler
from core.exceptions import SiteUnreachableError
from core.storage import StorageManager
from database.connection import DatabaseConnection
from utils.http import RequestManager
from utils.logger import get_logger

# تنظیم لاگر
logger = get_logger(__name__)

EXIT_OK = 0
EXIT_DATABASE_UNAVAILABLE = 1
EXIT_SITE_UNREACHABLE = 2

# متغیر نگهداری نمونه خزشگر برای امکان توقف مناسب
crawler_instance = None


def signal_handler(sig, frame):
    """مدیریت سیگنال‌های سیستم عامل برای توقف مناسب"""
    logger.info(f"سیگنال {sig} دریافت شد. در حال توقف خزشگر...")

    if crawler_instance is not None:
        crawler_instance.stop()
        crawler_instance.close()

    logger.info("خزشگر متوقف شد؛ اجرای بعدی کار را ادامه می‌دهد.")
    sys.exit(EXIT_OK)


def parse_arguments(argv=None):
    """پردازش آرگومان‌های خط فرمان"""
    parser = argparse.ArgumentParser(
        description="خزشگر کتابخانه متون: نویسندگان، کتاب‌ها، فصل‌ها و بندهای متن"
    )
    parser.add_argument(
        "--base-url", type=str, default=CRAWLER_CONFIG['base_url'],
        help=f"آدرس صفحه ریشه سایت (پیش‌فرض: {CRAWLER_CONFIG['base_url']})"
    )
    parser.add_argument(
        "--book-url", type=str, default=None,
        help="خزش فقط یک کتاب مشخص (نیازمند --author)"
    )
    parser.add_argument(
        "--author", type=str, default=None,
        help="نام نویسنده کتاب مشخص‌شده با --book-url"
    )
    parser.add_argument(
        "--title", type=str, default=None,
        help="عنوان کتاب مشخص‌شده با --book-url (پیش‌فرض: عنوان صفحه کتاب)"
    )
    parser.add_argument(
        "--max-depth", type=int, default=CRAWLER_CONFIG['max_depth'],
        help=f"حداکثر عمق پیمایش هر کتاب (پیش‌فرض: {CRAWLER_CONFIG['max_depth']})"
    )
    parser.add_argument(
        "--delay", type=float, default=CRAWLER_CONFIG['politeness_delay'],
        help=f"تأخیر بین درخواست‌ها (ثانیه، پیش‌فرض: {CRAWLER_CONFIG['politeness_delay']})"
    )
    parser.add_argument(
        "--use-selenium", action="store_true", default=CRAWLER_CONFIG['use_selenium'],
        help="بارگذاری صفحات با مرورگر سلنیوم"
    )
    parser.add_argument(
        "--respect-robots", action="store_true", default=CRAWLER_CONFIG['respect_robots'],
        help="رعایت محدودیت‌های robots.txt"
    )

    args = parser.parse_args(argv)
    if args.book_url and not args.author:
        parser.error("--book-url نیازمند --author است")
    return args


def initialize_database():
    """بررسی اتصال و ایجاد جداول پایگاه داده در صورت نیاز"""
    try:
        logger.info("در حال اتصال به پایگاه داده و بررسی جداول...")
        db_conn = DatabaseConnection()

        session = db_conn.get_session()
        try:
            session.execute(text("SELECT 1"))
        finally:
            session.close()

        db_conn.create_tables()
        logger.info("جداول پایگاه داده با موفقیت ایجاد یا بررسی شدند")
        return True
    except SQLAlchemyError as e:
        logger.error(f"خطا در اتصال به پایگاه داده یا ایجاد جداول: {str(e)}")
        return False


def log_stats(stats):
    """ثبت آمار نهایی خزش"""
    storage = stats.get('storage', {})
    logger.info("=" * 50)
    logger.info(f"صفحات دریافت‌شده: {stats['pages_fetched']}، خطاها: {stats['failures']}")
    logger.info(f"حکم صفحات: متن {stats['content_pages']}، فهرست {stats['index_pages']}، "
                f"خالی {stats['empty_pages']}")
    logger.info(f"نویسندگان: {stats['authors']}، کتاب‌ها: {stats['books']}، "
                f"فصل‌های نوشته‌شده: {stats['chapters_written']}")
    if storage:
        logger.info(f"پایگاه داده: {storage['total_authors']} نویسنده، {storage['total_books']} کتاب، "
                    f"{storage['total_chapters']} فصل، {storage['total_segments']} بند")
    logger.info(f"زمان اجرا: {stats['elapsed_seconds']} ثانیه")
    logger.info("=" * 50)


def start_crawling(args):
    """
    راه‌اندازی و اجرای فرآیند خزش

    Args:
        args: آرگومان‌های پارس شده خط فرمان

    Returns:
        int: کد خروج
    """
    global crawler_instance

    request_manager = RequestManager(
        base_url=args.base_url,
        default_delay=args.delay,
        respect_robots=args.respect_robots,
        use_selenium=args.use_selenium,
    )
    crawler_instance = LibraryCrawler(
        base_url=args.base_url,
        storage=StorageManager(),
        request_manager=request_manager,
        max_depth=args.max_depth,
    )

    try:
        if args.book_url:
            logger.info(f"خزش کتاب {args.book_url} از نویسنده «{args.author}»")
            stats = crawler_instance.harvest_single_book(args.book_url, args.author, title=args.title)
        else:
            stats = crawler_instance.run()
    except SiteUnreachableError as e:
        logger.critical(f"خروج به دلیل در دسترس نبودن سایت: {str(e)}")
        return EXIT_SITE_UNREACHABLE
    finally:
        crawler_instance.close()

    log_stats(stats)
    return EXIT_OK


def main(argv=None):
    """تابع اصلی برنامه"""
    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    args = parse_arguments(argv)

    logger.info("=" * 50)
    logger.info("برنامه خزشگر کتابخانه متون راه‌اندازی شد")
    logger.info(f"پیکربندی: URL={args.base_url}, عمق={args.max_depth}, تأخیر={args.delay}, "
                f"سلنیوم={args.use_selenium}")
    logger.info("=" * 50)

    if not initialize_database():
        logger.critical("خروج به دلیل مشکل در پایگاه داده")
        return EXIT_DATABASE_UNAVAILABLE

    exit_code = start_crawling(args)

    status = "با موفقیت" if exit_code == EXIT_OK else "با خطا"
    logger.info(f"برنامه خزشگر {status} به پایان رسید")
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
