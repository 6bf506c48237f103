"""
ماژول وضعیت پیمایش برای خزشگر کتابخانه متون

این ماژول شامل زمینه پیمایش هر کتاب (مجموعه آدرس‌های بازدیدشده و مجموعه
استثنا)، آمار خزش و کلاس PageVisitor است که دریافت و طبقه‌بندی یک صفحه و
ثبت خطاهای محلی آن را بر عهده دارد.
"""

import traceback
from datetime import datetime

from core.exceptions import FetchError, ParseError
from utils.http import normalize_url
from utils.logger import get_logger, get_crawler_logger

# تنظیم لاگرها
logger = get_logger(__name__)
crawler_logger = get_crawler_logger()


class TraversalContext:
    """
    زمینه پیمایش یک کتاب

    مجموعه بازدیدشده‌ها به یک کتاب محدود است؛ مجموعه استثنا (پیوندهای ثابت
    صفحه ریشه سایت) در تمام پیمایش ثابت می‌ماند.
    """

    def __init__(self, exclude=None, scope=None):
        """
        Args:
            exclude: آدرس‌هایی که هرگز به عنوان زیرپیوند دنبال نمی‌شوند
            scope: پیشوند آدرس‌های مجاز (None یعنی میزبان صفحه جاری)
        """
        self.visited_urls = set()
        self.exclude = frozenset(exclude or ())
        self.scope = scope

    def was_visited(self, url):
        return normalize_url(url) in self.visited_urls

    def mark_visited(self, url):
        self.visited_urls.add(normalize_url(url))

    def __len__(self):
        return len(self.visited_urls)


class CrawlState:
    """کلاس نگهداری آمار خزش"""

    def __init__(self):
        self.stats = {
            'pages_fetched': 0,
            'fetch_failures': 0,
            'parse_failures': 0,
            'content_pages': 0,
            'index_pages': 0,
            'empty_pages': 0,
            'chapters_written': 0,
            'authors': 0,
            'books': 0,
            'start_time': datetime.now(),
            'last_update_time': datetime.now()
        }

    def increment(self, key, amount=1):
        self.stats[key] += amount
        self.stats['last_update_time'] = datetime.now()

    def add_verdict(self, verdict):
        self.increment(f"{verdict}_pages")

    @property
    def failures(self):
        return self.stats['fetch_failures'] + self.stats['parse_failures']

    def get_stats(self):
        """
        دریافت آمار فعلی خزش

        Returns:
            dict: دیکشنری آمار
        """
        elapsed = (datetime.now() - self.stats['start_time']).total_seconds()

        stats = self.stats.copy()
        stats['failures'] = self.failures
        stats['elapsed_seconds'] = int(elapsed)
        return stats


class PageVisitor:
    """
    دریافت و طبقه‌بندی یک صفحه

    خطاهای دریافت و پردازش در همین‌جا گرفته، لاگ و در پایگاه داده ثبت
    می‌شوند و فقط شاخه جاری را متوقف می‌کنند.
    """

    def __init__(self, fetcher, classifier, storage, state=None):
        """
        Args:
            fetcher: شیء دارای متد fetch_document(url) (معمولاً RequestManager)
            classifier: نمونه PageClassifier
            storage: نمونه StorageManager
            state: نمونه CrawlState برای آمار (اختیاری)
        """
        self.fetcher = fetcher
        self.classifier = classifier
        self.storage = storage
        self.state = state or CrawlState()

    def record_failure(self, url, error, level):
        """ثبت خطای محلی یک شاخه در لاگ و پایگاه داده"""
        crawler_logger.error(f"خطا ({level}) در {url}: {str(error)}")
        self.storage.log_error(url, str(error), level, traceback.format_exc())

    def fetch(self, url):
        """
        دریافت صفحه و ساخت درخت سند

        Returns:
            PageNode یا None: گره ریشه سند، یا None در صورت خطا
        """
        try:
            document = self.fetcher.fetch_document(url)
        except FetchError as e:
            self.state.increment('fetch_failures')
            self.record_failure(url, e, 'fetch')
            return None
        except ParseError as e:
            self.state.increment('parse_failures')
            self.record_failure(url, e, 'parse')
            return None

        self.state.increment('pages_fetched')
        return document

    def visit(self, url, context):
        """
        دریافت و طبقه‌بندی صفحه در زمینه پیمایش جاری

        Args:
            url: آدرس صفحه
            context: زمینه پیمایش (TraversalContext)

        Returns:
            ClassificationResult یا None: نتیجه طبقه‌بندی، یا None در صورت خطا
        """
        document = self.fetch(url)
        if document is None:
            return None

        try:
            result = self.classifier.classify(document, url, exclude=context.exclude, scope=context.scope)
        except Exception as e:
            # خطای پیش‌بینی‌نشده طبقه‌بندی فقط همین شاخه را متوقف می‌کند
            self.state.increment('parse_failures')
            self.record_failure(url, e, 'parse')
            return None

        self.state.add_verdict(result.verdict)
        crawler_logger.info(f"{url} -> {result.verdict} "
                            f"({len(result.segments)} بند، {len(result.links)} زیرپیوند)")
        return result
