"""
ماژول هماهنگ‌کننده خزش برای خزشگر کتابخانه متون

این ماژول شامل کلاس LibraryCrawler است که از صفحه ریشه سایت شروع می‌کند،
نویسندگان و کتاب‌ها را شناسایی می‌کند و برای هر کتاب یک پیمایش بازگشتی
با زمینه پیمایش جداگانه اجرا می‌کند.
"""

from config.settings import CRAWLER_CONFIG
from core.classifier import PageClassifier
from core.content_extractor import default_scope, in_scope
from core.driller import RecursiveDriller
from core.exceptions import HarvestError, SiteUnreachableError
from core.storage import StorageManager
from core.surfer import LinearSurfer
from core.traversal import TraversalContext, CrawlState, PageVisitor
from utils.http import RequestManager, normalize_url
from utils.logger import get_logger, get_crawler_logger

# تنظیم لاگرها
logger = get_logger(__name__)
crawler_logger = get_crawler_logger()

__all__ = ["LibraryCrawler", "TraversalContext", "CrawlState"]


class LibraryCrawler:
    """کلاس اصلی هماهنگ‌کننده خزش: ریشه ← نویسندگان ← کتاب‌ها ← پیمایش هر کتاب"""

    def __init__(self, base_url=None, storage=None, request_manager=None, classifier=None,
                 max_depth=None, author_link_selector=None, scope=None):
        """
        مقداردهی اولیه خزشگر

        Args:
            base_url: آدرس صفحه ریشه سایت (پیش‌فرض: از تنظیمات)
            storage: نمونه StorageManager
            request_manager: شیء دارای متد fetch_document(url) (پیش‌فرض: RequestManager)
            classifier: نمونه PageClassifier
            max_depth: حداکثر عمق پیمایش هر کتاب
            author_link_selector: انتخابگر CSS برای محدود کردن پیوندهای نویسندگان
            scope: پیشوند آدرس‌های مجاز (پیش‌فرض: میزبان صفحه ریشه)
        """
        self.base_url = normalize_url(base_url or CRAWLER_CONFIG['base_url'])
        self.scope = scope or default_scope(self.base_url)
        self.author_link_selector = author_link_selector or CRAWLER_CONFIG['author_link_selector']

        self.storage = storage or StorageManager()

        self.request_manager = request_manager or RequestManager(base_url=self.base_url)
        self.classifier = classifier or PageClassifier()
        self.extractor = self.classifier.extractor

        self.state = CrawlState()
        self.visitor = PageVisitor(self.request_manager, self.classifier, self.storage, self.state)
        surfer = LinearSurfer(self.request_manager, self.classifier, self.storage, state=self.state)
        self.driller = RecursiveDriller(self.request_manager, self.classifier, self.storage,
                                        surfer=surfer, state=self.state, max_depth=max_depth)

        self.exclusion_set = None
        self.running = False

    def load_root(self):
        """
        دریافت صفحه ریشه و ثبت پیوندهای آن به عنوان مجموعه استثنا

        Returns:
            PageNode: گره ریشه سند صفحه اصلی

        Raises:
            SiteUnreachableError: اگر صفحه ریشه قابل دریافت یا پردازش نباشد
        """
        try:
            document = self.request_manager.fetch_document(self.base_url)
        except HarvestError as e:
            logger.critical(f"صفحه ریشه {self.base_url} در دسترس نیست: {str(e)}")
            raise SiteUnreachableError(f"Root page unreachable: {str(e)}", url=self.base_url) from e

        self.state.increment('pages_fetched')
        self.exclusion_set = frozenset(self.extractor.extract_all_links(document, self.base_url))
        logger.info(f"صفحه ریشه دریافت شد؛ {len(self.exclusion_set)} پیوند ثابت در مجموعه استثنا")
        return document

    def find_author_links(self, document):
        """
        شناسایی پیوندهای نویسندگان در صفحه ریشه

        Args:
            document: گره ریشه سند صفحه اصلی

        Returns:
            list: لیست Link ها به ترتیب سند
        """
        if self.author_link_selector:
            anchors = []
            for node in document.select(self.author_link_selector):
                anchors.extend([node] if node.tag == 'a' else node.find_all('a'))
            candidates = (self.extractor.link_from_anchor(anchor, self.base_url) for anchor in anchors)
            candidates = (link for link in candidates if link is not None)
        else:
            candidates = self.extractor.iter_links(document, self.base_url)

        return self.extractor.filter_sub_links(candidates, self.base_url, scope=self.scope)

    def run(self):
        """
        اجرای کامل خزش سایت

        Returns:
            dict: آمار خزش

        Raises:
            SiteUnreachableError: اگر صفحه ریشه در دسترس نباشد
        """
        self.running = True
        logger.info(f"شروع خزش از {self.base_url} (محدوده {self.scope})")

        try:
            document = self.load_root()
            authors = self.find_author_links(document)
            logger.info(f"{len(authors)} نویسنده شناسایی شد")

            for author_link in authors:
                if not self.running:
                    logger.info("خزش متوقف شد")
                    break
                self.harvest_author(author_link)
        finally:
            self.running = False

        stats = self.get_stats()
        logger.info(f"پایان خزش: {stats['books']} کتاب، {stats['chapters_written']} فصل، "
                    f"{stats['failures']} خطا")
        return stats

    def stop(self):
        """درخواست توقف خزش پس از نویسنده جاری"""
        self.running = False

    def harvest_author(self, author_link):
        """
        خزش یک نویسنده و تمام کتاب‌های او

        Args:
            author_link: Link نویسنده (آدرس و نام)

        Returns:
            int: تعداد فصل‌های ذخیره‌شده
        """
        author_url = normalize_url(author_link.url)
        author_name = author_link.text

        author_id = self.storage.get_or_create_author(author_name, author_url)
        if author_id is None:
            self.storage.log_error(author_url, f"ذخیره نویسنده «{author_name}» انجام نشد", 'author')
            return 0
        self.state.increment('authors')

        document = self.visitor.fetch(author_url)
        if document is None:
            return 0

        candidates = self.extractor.iter_links(document, author_url)
        books = self.extractor.filter_sub_links(candidates, author_url, exclude=self.exclusion_set,
                                                scope=self.scope)
        crawler_logger.info(f"نویسنده «{author_name}»: {len(books)} کتاب")

        chapters = 0
        for book_link in books:
            if not self.running:
                break
            chapters += self.harvest_book(book_link.url, book_link.text, author_id, category=author_name)
        return chapters

    def harvest_book(self, book_url, title, author_id, category=None):
        """
        خزش یک کتاب با زمینه پیمایش جداگانه

        Args:
            book_url: آدرس کتاب
            title: عنوان کتاب
            author_id: شناسه نویسنده
            category: دسته کتاب (پیش‌فرض: نام نویسنده)

        Returns:
            int: تعداد فصل‌های ذخیره‌شده
        """
        book_url = normalize_url(book_url)

        book_id = self.storage.get_or_create_book(author_id, title, book_url, category)
        if book_id is None:
            self.storage.log_error(book_url, f"ذخیره کتاب «{title}» انجام نشد", 'book')
            return 0
        self.state.increment('books')

        context = TraversalContext(exclude=self.exclusion_set, scope=self.scope)
        chapters = self.driller.drill(book_url, book_id, [title], context)
        logger.info(f"کتاب «{title}»: {chapters} فصل، {len(context)} صفحه بازدید شد")
        return chapters

    def harvest_single_book(self, book_url, author_name, title=None):
        """
        خزش یک کتاب مشخص (برای ادامه کار روی یک کتاب)

        Args:
            book_url: آدرس کتاب
            author_name: نام نویسنده
            title: عنوان کتاب (پیش‌فرض: عنوان صفحه کتاب)

        Returns:
            dict: آمار خزش

        Raises:
            SiteUnreachableError: اگر صفحه ریشه در دسترس نباشد
        """
        self.running = True
        try:
            self.load_root()

            book_url = normalize_url(book_url)
            if not in_scope(book_url, self.scope):
                logger.warning(f"آدرس کتاب {book_url} خارج از محدوده {self.scope} است")

            if not title:
                document = self.visitor.fetch(book_url)
                if document is not None:
                    title = self.extractor.extract_title(document)
                title = title or book_url

            author_id = self.storage.get_or_create_author(author_name)
            if author_id is None:
                self.storage.log_error(book_url, f"ذخیره نویسنده «{author_name}» انجام نشد", 'author')
            else:
                self.state.increment('authors')
                self.harvest_book(book_url, title, author_id, category=author_name)
        finally:
            self.running = False

        return self.get_stats()

    def get_stats(self):
        """
        دریافت آمار خزش و ذخیره‌سازی

        Returns:
            dict: دیکشنری آمار
        """
        stats = self.state.get_stats()
        stats['storage'] = self.storage.get_stats()
        return stats

    def close(self):
        """آزادسازی منابع دریافت صفحات"""
        close = getattr(self.request_manager, 'close', None)
        if close is not None:
            close()
