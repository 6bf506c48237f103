"""
ماژول ذخیره‌سازی:
این ماژول شامل کلاس StorageManager است که داده‌های استخراج‌شده (نویسنده، کتاب،
فصل و بندهای متن) را به صورت تکرارپذیر در پایگاه داده ذخیره می‌کند. هر موجودیت
بر اساس کلید یکتای خود حداکثر یک بار ایجاد می‌شود، بنابراین اجرای دوباره خزش
رکورد تکراری ایجاد نمی‌کند.
"""

from datetime import datetime
from typing import Dict, List, Optional, Union

from utils.logger import get_logger
from database.connection import DatabaseConnection
from database.operations import BaseDBOperations
from models.library import Author, Book, Chapter, Segment
from models.scraping_error import ScrapingError, ERROR_LEVELS

logger = get_logger(__name__)
StatsDict = Dict[str, Union[int, datetime, float, None]]


class StorageManager:
    """
    کلاس مدیریت ذخیره‌سازی:
    دریافت‌یا‌ایجاد برای نویسنده، کتاب و فصل، درج بندها با نادیده‌گرفتن
    تکراری‌ها و ثبت خطاهای خزش.
    """

    def __init__(self, db: Optional[DatabaseConnection] = None) -> None:
        """
        مقداردهی اولیه وضعیت ذخیره‌سازی

        Args:
            db: نمونه DatabaseConnection (پیش‌فرض: نمونه Singleton)
        """
        self.db = db or DatabaseConnection()
        self.db_ops = BaseDBOperations(self.db)

        # آمار ذخیره‌سازی
        self.stats: StatsDict = {
            'authors_created': 0,
            'authors_reused': 0,
            'books_created': 0,
            'books_reused': 0,
            'chapters_created': 0,
            'chapters_reused': 0,
            'segments_inserted': 0,
            'segments_skipped': 0,
            'errors_logged': 0,
            'start_time': datetime.now(),
            'last_store_time': None,
        }

    def _get_or_create(self, model_class, key: str, defaults: Dict, **lookup) -> Optional[int]:
        instance, created = self.db_ops.get_or_create(model_class, defaults=defaults, **lookup)
        if instance is None:
            logger.error(f"ذخیره‌سازی {model_class.__name__} با {lookup} انجام نشد")
            return None

        self.stats[f"{key}_{'created' if created else 'reused'}"] += 1
        self.stats['last_store_time'] = datetime.now()
        if created:
            logger.info(f"{model_class.__name__} جدید ایجاد شد: {lookup} (شناسه {instance.id})")
        return instance.id

    def get_or_create_author(self, name: str, canonical_url: Optional[str] = None) -> Optional[int]:
        """
        دریافت یا ایجاد نویسنده (یکتا بر اساس نام)

        Returns:
            int یا None: شناسه نویسنده، یا None در صورت بروز خطا
        """
        return self._get_or_create(Author, 'authors', {'canonical_url': canonical_url}, name=name)

    def get_or_create_book(self, author_id: int, title: str, canonical_url: str,
                           category: Optional[str] = None) -> Optional[int]:
        """
        دریافت یا ایجاد کتاب (یکتا بر اساس آدرس)

        Args:
            author_id: شناسه نویسنده
            title: عنوان کتاب
            canonical_url: آدرس متعارف کتاب
            category: دسته کتاب (معمولاً نام نویسنده)

        Returns:
            int یا None: شناسه کتاب، یا None در صورت بروز خطا
        """
        defaults = {'author_id': author_id, 'title': title, 'category': category}
        return self._get_or_create(Book, 'books', defaults, canonical_url=canonical_url)

    def get_or_create_chapter(self, book_id: int, title: str, sequence_number: int,
                              canonical_url: str) -> Optional[int]:
        """
        دریافت یا ایجاد فصل (یکتا بر اساس آدرس)

        Returns:
            int یا None: شناسه فصل، یا None در صورت بروز خطا
        """
        defaults = {'book_id': book_id, 'title': title, 'sequence_number': sequence_number}
        return self._get_or_create(Chapter, 'chapters', defaults, canonical_url=canonical_url)

    def add_segments(self, chapter_id: int, segments: List[str]) -> Optional[int]:
        """
        افزودن بندهای متن یک فصل

        شماره ترتیب هر بند، جایگاه آن در لیست (از ۱) است. بندهایی که شماره
        ترتیب آن‌ها در این فصل قبلاً ذخیره شده نادیده گرفته می‌شوند.

        Args:
            chapter_id: شناسه فصل
            segments: بندهای متن به ترتیب سند

        Returns:
            int یا None: تعداد بندهای جدید درج‌شده، یا None در صورت بروز خطا
        """
        rows = [
            {'chapter_id': chapter_id, 'sequence_number': index, 'text': text, 'created_at': datetime.utcnow()}
            for index, text in enumerate(segments, start=1)
            if text
        ]
        if not rows:
            return 0

        existing = {
            segment.sequence_number
            for segment in self.db_ops.get_all(Segment, limit=None, chapter_id=chapter_id)
        }
        new_rows = [row for row in rows if row['sequence_number'] not in existing]

        if not self.db_ops.insert_ignore(Segment, new_rows):
            return None

        self.stats['segments_inserted'] += len(new_rows)
        self.stats['segments_skipped'] += len(rows) - len(new_rows)
        self.stats['last_store_time'] = datetime.now()
        logger.debug(f"{len(new_rows)} بند برای فصل {chapter_id} درج شد "
                     f"({len(rows) - len(new_rows)} بند تکراری نادیده گرفته شد)")
        return len(new_rows)

    def log_error(self, url: str, message: str, level: str, stack_trace: Optional[str] = None) -> bool:
        """
        ثبت خطای خزش در پایگاه داده

        Args:
            url: آدرس صفحه‌ای که خطا در آن رخ داده
            message: پیام خطا
            level: مرحله خطا (fetch, parse, author, book, chapter, segment)
            stack_trace: ردپای خطا (اختیاری)

        Returns:
            bool: آیا خطا ثبت شد؟
        """
        if level not in ERROR_LEVELS:
            logger.warning(f"سطح خطای ناشناخته {level}؛ به عنوان fetch ثبت می‌شود")
            level = 'fetch'

        record = self.db_ops.create(ScrapingError(
            url=url,
            error_message=message or 'unknown error',
            stack_trace=stack_trace,
            level=level,
        ))
        if record is None:
            return False

        self.stats['errors_logged'] += 1
        return True

    def get_stats(self) -> StatsDict:
        """
        دریافت آمار ذخیره‌سازی همراه با تعداد رکوردهای پایگاه داده

        Returns:
            dict: آمار ذخیره‌سازی
        """
        stats = self.stats.copy()
        stats['total_authors'] = self.db_ops.count(Author)
        stats['total_books'] = self.db_ops.count(Book)
        stats['total_chapters'] = self.db_ops.count(Chapter)
        stats['total_segments'] = self.db_ops.count(Segment)
        stats['total_errors'] = self.db_ops.count(ScrapingError)
        stats['runtime_seconds'] = (datetime.now() - self.stats['start_time']).total_seconds()
        return stats
