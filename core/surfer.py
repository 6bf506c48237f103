"""
ماژول پیمایش خطی برای خزشگر کتابخانه متون

LinearSurfer زنجیره صفحات متن یک فصل را با دنبال کردن پیوند «صفحه بعد» طی
می‌کند و هر صفحه را به عنوان یک فصل همراه با بندهایش ذخیره می‌کند.
"""

from config.settings import CRAWLER_CONFIG
from core.traversal import PageVisitor, CrawlState
from utils.http import normalize_url
from utils.logger import get_logger
from utils.text import is_front_matter

logger = get_logger(__name__)


class SurferState:
    FOLLOWING = 'following'
    STOPPED = 'stopped'


class LinearSurfer:
    """
    پیمایشگر خطی زنجیره صفحات متن

    پیمایش در این حالت‌ها متوقف می‌شود: آدرس تکراری (در مجموعه سراسری یا
    مجموعه همین نشست)، خطای دریافت، صفحه غیرمتنی، بازگشت زنجیره به مقدمه
    کتاب، یا نبود پیوند صفحه بعد.
    """

    def __init__(self, fetcher, classifier, storage, state=None, reset_guard_sequence=None):
        """
        Args:
            fetcher: شیء دارای متد fetch_document(url)
            classifier: نمونه PageClassifier
            storage: نمونه StorageManager
            state: نمونه CrawlState برای آمار (اختیاری)
            reset_guard_sequence: شماره فصلی که پس از آن بازگشت به مقدمه کتاب پیمایش را متوقف می‌کند
        """
        self.storage = storage
        self.state = state or CrawlState()
        self.visitor = PageVisitor(fetcher, classifier, storage, self.state)
        self.reset_guard_sequence = (reset_guard_sequence if reset_guard_sequence is not None
                                     else CRAWLER_CONFIG['reset_guard_sequence'])
        self.status = SurferState.STOPPED

    def surf(self, start_url, book_id, base_title, context, start_sequence=1, first_result=None):
        """
        پیمایش زنجیره صفحات از آدرس شروع

        Args:
            start_url: آدرس نخستین صفحه متن
            book_id: شناسه کتاب
            base_title: عنوان پایه فصل‌ها
            context: زمینه پیمایش کتاب (TraversalContext)
            start_sequence: شماره ترتیب نخستین فصل
            first_result: نتیجه طبقه‌بندی صفحه شروع (اگر قبلاً دریافت شده باشد)

        Returns:
            int: تعداد فصل‌های ذخیره‌شده
        """
        session_visited = set()
        sequence = start_sequence
        chapters = 0
        url = normalize_url(start_url)
        result = first_result

        self.status = SurferState.FOLLOWING
        logger.info(f"شروع پیمایش خطی از {url} برای «{base_title}»")

        while self.status == SurferState.FOLLOWING:
            if context.was_visited(url) or url in session_visited:
                logger.info(f"آدرس {url} قبلاً بازدید شده است؛ پایان زنجیره")
                break

            context.mark_visited(url)
            session_visited.add(url)

            if result is None:
                result = self.visitor.visit(url, context)
            if result is None or not result.is_content:
                break

            if sequence > self.reset_guard_sequence and is_front_matter(result.title):
                logger.info(f"زنجیره در {url} به مقدمه کتاب بازگشت؛ پایان زنجیره")
                break

            if not self._store_chapter(url, book_id, base_title, sequence, result.segments):
                break

            chapters += 1
            sequence += 1

            next_url = result.pagination_url
            result = None
            if not next_url or normalize_url(next_url) == url:
                break
            url = normalize_url(next_url)

        self.status = SurferState.STOPPED
        self.state.increment('chapters_written', chapters)
        logger.info(f"پایان پیمایش خطی «{base_title}»: {chapters} فصل ذخیره شد")
        return chapters

    def _store_chapter(self, url, book_id, base_title, sequence, segments):
        title = f"{base_title} - Part {sequence}"
        chapter_id = self.storage.get_or_create_chapter(book_id, title, sequence, url)
        if chapter_id is None:
            self.storage.log_error(url, f"ذخیره فصل «{title}» انجام نشد", 'chapter')
            return False

        if self.storage.add_segments(chapter_id, segments) is None:
            self.storage.log_error(url, f"ذخیره بندهای فصل «{title}» انجام نشد", 'segment')
            return False

        return True
