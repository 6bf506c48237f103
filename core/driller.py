"""
ماژول پیمایش بازگشتی برای خزشگر کتابخانه متون

RecursiveDriller صفحات فهرست یک کتاب را به صورت عمق‌اول پیمایش می‌کند و با
رسیدن به نخستین صفحه متن هر شاخه، ادامه کار را به LinearSurfer می‌سپارد.
"""

from config.settings import CRAWLER_CONFIG
from core.surfer import LinearSurfer
from core.traversal import PageVisitor, CrawlState
from utils.http import normalize_url
from utils.logger import get_logger

logger = get_logger(__name__)

BREADCRUMB_SEPARATOR = " / "


def base_title_from_breadcrumb(breadcrumb):
    """
    عنوان پایه فصل‌ها: مسیر فهرست‌ها بدون عنوان کتاب

    Args:
        breadcrumb: لیست عنوان‌ها از ریشه (عنوان کتاب) تا صفحه جاری

    Returns:
        str: عنوان‌ها به هم پیوسته با " / "، یا عنوان کتاب اگر مسیر خالی باشد
    """
    parts = [part for part in breadcrumb[1:] if part]
    if parts:
        return BREADCRUMB_SEPARATOR.join(parts)
    return breadcrumb[0] if breadcrumb else ""


class RecursiveDriller:
    """پیمایشگر بازگشتی صفحات فهرست یک کتاب"""

    def __init__(self, fetcher, classifier, storage, surfer=None, state=None, max_depth=None):
        """
        Args:
            fetcher: شیء دارای متد fetch_document(url)
            classifier: نمونه PageClassifier
            storage: نمونه StorageManager
            surfer: نمونه LinearSurfer (پیش‌فرض: ساخته می‌شود)
            state: نمونه CrawlState برای آمار (اختیاری)
            max_depth: حداکثر عمق پیمایش
        """
        self.state = state or CrawlState()
        self.visitor = PageVisitor(fetcher, classifier, storage, self.state)
        self.surfer = surfer or LinearSurfer(fetcher, classifier, storage, state=self.state)
        self.max_depth = max_depth if max_depth is not None else CRAWLER_CONFIG['max_depth']

    def drill(self, url, book_id, breadcrumb, context, depth=0):
        """
        پیمایش یک گره و زیرشاخه‌های آن

        Args:
            url: آدرس صفحه
            book_id: شناسه کتاب
            breadcrumb: لیست عنوان‌ها از عنوان کتاب تا این صفحه
            context: زمینه پیمایش کتاب (TraversalContext)
            depth: عمق فعلی

        Returns:
            int: تعداد فصل‌های ذخیره‌شده در این شاخه
        """
        url = normalize_url(url)

        if context.was_visited(url):
            return 0

        if depth > self.max_depth:
            logger.warning(f"عمق {depth} برای {url} از حداکثر {self.max_depth} بیشتر است")
            return 0

        result = self.visitor.visit(url, context)
        if result is None:
            context.mark_visited(url)
            return 0

        if result.is_content:
            # صفحه متن در پیمایشگر خطی علامت‌گذاری می‌شود
            base_title = base_title_from_breadcrumb(breadcrumb)
            return self.surfer.surf(url, book_id, base_title, context, start_sequence=1, first_result=result)

        context.mark_visited(url)

        if result.is_empty:
            logger.debug(f"صفحه {url} نه متن است نه فهرست")
            return 0

        logger.info(f"فهرست {url} در عمق {depth}: {len(result.links)} زیرپیوند")
        chapters = 0
        for link in result.links:
            chapters += self.drill(link.url, book_id, list(breadcrumb) + [link.text], context, depth + 1)
        return chapters
