"""
ماژول طبقه‌بندی صفحات برای خزشگر کتابخانه متون

این ماژول تعیین می‌کند که یک صفحه دلخواه، صفحه متن (CONTENT)، صفحه فهرست
(INDEX) یا هیچ‌کدام (EMPTY) است. حکم صفحه تنها از روی درخت سند و آستانه‌های
تجربی تعیین می‌شود و به ساختار HTML خاص هیچ سایتی وابسته نیست.
"""

from typing import Dict, Iterable, List, Optional, Any

from core.content_extractor import ContentExtractor, Link
from core.document import PageNode, parse_document
from utils.http import normalize_url
from utils.logger import get_logger

logger = get_logger(__name__)


class PageVerdict:
    """حکم‌های ممکن برای یک صفحه"""

    CONTENT = 'content'
    INDEX = 'index'
    EMPTY = 'empty'

    ALL = (CONTENT, INDEX, EMPTY)


class ClassificationResult:
    """نتیجه طبقه‌بندی یک صفحه"""

    def __init__(self, verdict: str, url: str, segments: Optional[List[str]] = None,
                 pagination_url: Optional[str] = None, title: str = "",
                 links: Optional[List[Link]] = None) -> None:
        self.verdict = verdict
        self.url = url
        self.segments = segments or []
        self.pagination_url = pagination_url
        self.title = title
        self.links = links or []

    @property
    def is_content(self) -> bool:
        return self.verdict == PageVerdict.CONTENT

    @property
    def is_index(self) -> bool:
        return self.verdict == PageVerdict.INDEX

    @property
    def is_empty(self) -> bool:
        return self.verdict == PageVerdict.EMPTY

    def to_dict(self) -> Dict[str, Any]:
        return {
            'verdict': self.verdict,
            'url': self.url,
            'title': self.title,
            'segments': list(self.segments),
            'pagination_url': self.pagination_url,
            'links': [{'url': link.url, 'text': link.text} for link in self.links],
        }

    def __eq__(self, other):
        if not isinstance(other, ClassificationResult):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return (f"ClassificationResult(verdict='{self.verdict}', url='{self.url}', "
                f"segments={len(self.segments)}, links={len(self.links)})")


class PageClassifier:
    """
    طبقه‌بند صفحات:
    بلوک اصلی متن را انتخاب و تمیز می‌کند، پیوند صفحه بعد و زیرپیوندها را
    استخراج می‌کند و بر اساس آن‌ها حکم صفحه را صادر می‌کند.
    """

    def __init__(self, extractor: Optional[ContentExtractor] = None) -> None:
        self.extractor = extractor or ContentExtractor()

    def classify(self, document: PageNode, url: str,
                 exclude: Optional[Iterable[str]] = None,
                 scope: Optional[str] = None) -> ClassificationResult:
        """
        طبقه‌بندی یک صفحه

        Args:
            document: گره ریشه سند
            url: آدرس صفحه جاری
            exclude: مجموعه آدرس‌های ثابت ناوبری سایت
            scope: پیشوند آدرس‌های مجاز برای زیرپیوندها

        Returns:
            ClassificationResult: حکم صفحه همراه با بندها یا زیرپیوندها
        """
        url = normalize_url(url)

        candidate = self.extractor.select_candidate(document)
        segments = self.extractor.extract_segments(candidate)

        if segments:
            result = ClassificationResult(
                PageVerdict.CONTENT,
                url,
                segments=segments,
                pagination_url=self._pagination_url(document, url),
                title=self.extractor.extract_title(document, candidate),
            )
        else:
            links = self.extractor.extract_sub_links(document, url, exclude=exclude, scope=scope)
            verdict = PageVerdict.INDEX if links else PageVerdict.EMPTY
            result = ClassificationResult(
                verdict,
                url,
                title=self.extractor.extract_title(document),
                links=links,
            )

        logger.debug(f"حکم صفحه {url}: {result.verdict} "
                     f"({len(result.segments)} بند، {len(result.links)} زیرپیوند)")
        return result

    def classify_html(self, html_content: str, url: str,
                      exclude: Optional[Iterable[str]] = None,
                      scope: Optional[str] = None) -> ClassificationResult:
        """طبقه‌بندی مستقیم از محتوای HTML"""
        return self.classify(parse_document(html_content), url, exclude=exclude, scope=scope)

    def _pagination_url(self, document: PageNode, url: str) -> Optional[str]:
        next_url = self.extractor.find_pagination_url(document, url)
        if next_url == url:
            return None
        return next_url
