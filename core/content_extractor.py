"""
ماژول استخراج محتوا برای خزشگر کتابخانه متون

این ماژول شامل کلاس ContentExtractor است که بلوک اصلی متن صفحه را بدون
آگاهی قبلی از ساختار HTML سایت پیدا می‌کند، آن را به بندهای متن تمیز
تقسیم می‌کند و پیوندهای صفحه (پیوند صفحه بعد و زیرپیوندها) را استخراج می‌کند.
"""

from collections import namedtuple
from typing import Iterable, Iterator, List, Optional, Set
from urllib.parse import urlparse

from config.settings import CLASSIFIER_CONFIG
from core.document import PageNode
from utils.http import normalize_url
from utils.logger import get_logger
from utils.text import (
    count_script_chars,
    is_boilerplate_line,
    is_navigation_label,
    is_next_label,
    is_valid_segment,
    normalize_whitespace,
    strip_arrow_artifact,
)

logger = get_logger(__name__)

Link = namedtuple('Link', ['url', 'text'])

# عناصر سطح بلوک که نامزد بلوک اصلی متن هستند
CANDIDATE_TAGS = {'div', 'section', 'article', 'main', 'td', 'blockquote', 'p'}

# عناصری که ناحیه ناوبری محسوب می‌شوند
NAVIGATION_TAGS = {'nav', 'header', 'footer', 'aside', 'menu'}
NAVIGATION_TOKENS = {
    'nav', 'navbar', 'navigation', 'menu', 'menubar', 'breadcrumb', 'breadcrumbs',
    'sidebar', 'footer', 'header', 'topbar',
}

# عناصری که در مرحله تمیزسازی کنار گذاشته می‌شوند
STRIPPED_TAGS = {'h1', 'h2', 'h3', 'h4', 'h5', 'h6', 'ul', 'ol', 'dl', 'hr', 'menu'}

HEADING_TAGS = ['h1', 'h2', 'h3', 'h4', 'h5', 'h6']

_IGNORED_HREF_PREFIXES = ('javascript:', 'mailto:', 'tel:', '#')


class CandidateScore(namedtuple('CandidateScore', ['node', 'char_count', 'link_count'])):
    """امتیاز یک بلوک نامزد: تعداد نویسه‌های خط هدف و تعداد پیوندها"""

    __slots__ = ()

    @property
    def chars_per_link(self):
        if self.link_count == 0:
            return float('inf')
        return self.char_count / self.link_count


def is_navigation_region(node: PageNode) -> bool:
    """
    تشخیص ناحیه ناوبری یا منو

    Args:
        node: گره سند

    Returns:
        bool: آیا گره یک ناحیه ناوبری است؟
    """
    if node.tag in NAVIGATION_TAGS:
        return True

    if (node.get('role') or '').lower() == 'navigation':
        return True

    markers = f"{node.get('id', '')} {node.get('class', '')}".lower()
    tokens = set(markers.replace('-', ' ').replace('_', ' ').split())
    return not tokens.isdisjoint(NAVIGATION_TOKENS)


def default_scope(url: str) -> str:
    """محدوده پیش‌فرض: کل میزبان آدرس جاری"""
    parsed = urlparse(url)
    return f"{parsed.scheme}://{parsed.netloc}/"


def in_scope(url: str, scope: Optional[str]) -> bool:
    return not scope or url.startswith(scope)


class ContentExtractor:
    """
    کلاس استخراج محتوا:
    انتخاب بلوک اصلی متن، تمیزسازی آن به بندها و استخراج پیوندهای صفحه.
    """

    def __init__(self, min_script_chars: Optional[int] = None,
                 min_chars_per_link: Optional[float] = None,
                 min_segment_length: Optional[int] = None,
                 script: Optional[str] = None) -> None:
        """
        مقداردهی اولیه استخراج‌کننده با آستانه‌های طبقه‌بندی

        Args:
            min_script_chars: حداقل نویسه‌های خط هدف برای بلوک متنی (T1)
            min_chars_per_link: حداقل نسبت نویسه به پیوند (T2)
            min_segment_length: حداقل طول یک بند متن
            script: خط هدف (hebrew, arabic, latin)
        """
        self.min_script_chars = (min_script_chars if min_script_chars is not None
                                 else CLASSIFIER_CONFIG['min_script_chars'])
        self.min_chars_per_link = (min_chars_per_link if min_chars_per_link is not None
                                   else CLASSIFIER_CONFIG['min_chars_per_link'])
        self.min_segment_length = (min_segment_length if min_segment_length is not None
                                   else CLASSIFIER_CONFIG['min_segment_length'])
        self.script = script or CLASSIFIER_CONFIG['target_script']

    # ------------------------------------------------------------------
    # انتخاب بلوک اصلی
    # ------------------------------------------------------------------

    def iter_candidates(self, node: PageNode) -> Iterator[PageNode]:
        """پیمایش بلوک‌های نامزد به ترتیب سند، بدون ورود به نواحی ناوبری"""
        for child in node.children:
            if is_navigation_region(child):
                continue
            if child.tag in CANDIDATE_TAGS:
                yield child
            yield from self.iter_candidates(child)

    def score_candidates(self, document: PageNode) -> List[CandidateScore]:
        scores = []
        for candidate in self.iter_candidates(document):
            char_count = count_script_chars(candidate.text, self.script)
            link_count = len(candidate.find_all('a'))
            scores.append(CandidateScore(candidate, char_count, link_count))
        return scores

    def is_content_bearing(self, score: CandidateScore) -> bool:
        if score.char_count <= self.min_script_chars:
            return False
        return score.link_count == 0 or score.chars_per_link > self.min_chars_per_link

    def select_candidate(self, document: PageNode) -> Optional[PageNode]:
        """
        انتخاب بلوک اصلی متن

        از میان بلوک‌های واجد شرایط، بلوک با بیشترین نویسه خط هدف انتخاب
        می‌شود؛ در تساوی، آخرین بلوک به ترتیب سند برنده است.

        Args:
            document: گره ریشه سند

        Returns:
            PageNode یا None: بلوک انتخاب‌شده، یا None اگر هیچ بلوکی واجد شرایط نباشد
        """
        best = None
        for score in self.score_candidates(document):
            if not self.is_content_bearing(score):
                continue
            if best is None or score.char_count >= best.char_count:
                best = score

        if best is not None:
            logger.debug(f"بلوک اصلی انتخاب شد: <{best.node.tag}> با {best.char_count} نویسه و {best.link_count} پیوند")
        return best.node if best else None

    # ------------------------------------------------------------------
    # تمیزسازی و تقسیم به بندها
    # ------------------------------------------------------------------

    @staticmethod
    def _is_stripped(node: PageNode) -> bool:
        return node.tag in STRIPPED_TAGS or is_navigation_region(node)

    def extract_segments(self, candidate: Optional[PageNode]) -> List[str]:
        """
        تبدیل بلوک انتخاب‌شده به بندهای متن تمیز

        عنوان‌ها، فهرست‌ها، خطوط افقی و نواحی ناوبری کنار گذاشته می‌شوند، متن
        بر اساس شکست خط تقسیم می‌شود و خطوط تکراری سایت حذف می‌شوند.

        Args:
            candidate: بلوک اصلی متن

        Returns:
            list: بندهای پذیرفته‌شده به ترتیب سند
        """
        if candidate is None:
            return []

        segments = []
        for line in candidate.render_text(skip=self._is_stripped).split('\n'):
            line = strip_arrow_artifact(line.strip())
            if not line or is_boilerplate_line(line):
                continue
            if is_valid_segment(line, self.script, self.min_segment_length):
                segments.append(line)

        return segments

    def extract_title(self, document: PageNode, candidate: Optional[PageNode] = None) -> str:
        """
        استخراج عنوان صفحه

        اولویت: نخستین عنوان درون بلوک اصلی، سپس نخستین h1 تا h3 سند، سپس تگ title.
        """
        heading = candidate.find_first(HEADING_TAGS) if candidate is not None else None
        if heading is None:
            heading = document.find_first(['h1', 'h2', 'h3'])
        if heading is None:
            heading = document.find_first('title')

        if heading is None:
            return ""
        return normalize_whitespace(heading.text.replace('\n', ' '))

    # ------------------------------------------------------------------
    # پیوندها
    # ------------------------------------------------------------------

    @staticmethod
    def iter_links(document: PageNode, base_url: str) -> Iterator[Link]:
        """
        پیمایش تمام پیوندهای سند با آدرس مطلق و متن قابل مشاهده

        Args:
            document: گره ریشه سند
            base_url: آدرس صفحه جاری برای تکمیل آدرس‌های نسبی
        """
        for anchor in document.find_all('a'):
            link = ContentExtractor.link_from_anchor(anchor, base_url)
            if link is not None:
                yield link

    @staticmethod
    def link_from_anchor(anchor: PageNode, base_url: str) -> Optional[Link]:
        """ساخت Link از یک تگ <a>؛ None برای پیوندهای غیر HTTP یا بدون آدرس"""
        href = (anchor.get('href') or '').strip()
        if not href or href.lower().startswith(_IGNORED_HREF_PREFIXES):
            return None

        try:
            url = normalize_url(href, base_url)
        except ValueError as e:
            logger.debug(f"پیوند نامعتبر {href!r} نادیده گرفته شد: {str(e)}")
            return None

        if not url.startswith(('http://', 'https://')):
            return None

        return Link(url, normalize_whitespace(anchor.text.replace('\n', ' ')))

    def extract_all_links(self, document: PageNode, base_url: str) -> List[str]:
        """تمام آدرس‌های مقصد صفحه (بدون تکرار، به ترتیب سند)"""
        return list(dict.fromkeys(link.url for link in self.iter_links(document, base_url)))

    def find_pagination_url(self, document: PageNode, url: str) -> Optional[str]:
        """
        یافتن پیوند «صفحه بعد» در سند اصلی (تمیزنشده)

        Returns:
            str یا None: آدرس صفحه بعد
        """
        for link in self.iter_links(document, url):
            if is_next_label(link.text):
                return link.url
        return None

    def extract_sub_links(self, document: PageNode, url: str,
                          exclude: Optional[Iterable[str]] = None,
                          scope: Optional[str] = None) -> List[Link]:
        """
        استخراج زیرپیوندهای صفحه

        پیوندهای خارج از محدوده، موجود در مجموعه استثنا، برابر با آدرس جاری
        یا دارای برچسب ناوبری کنار گذاشته می‌شوند.

        Args:
            document: گره ریشه سند
            url: آدرس صفحه جاری
            exclude: مجموعه آدرس‌های ثابت ناوبری سایت
            scope: پیشوند آدرس‌های مجاز (پیش‌فرض: کل میزبان)

        Returns:
            list: لیست Link ها بدون تکرار و به ترتیب سند
        """
        current = normalize_url(url)
        return self.filter_sub_links(self.iter_links(document, current), current, exclude, scope)

    @staticmethod
    def filter_sub_links(candidates: Iterable[Link], url: str,
                         exclude: Optional[Iterable[str]] = None,
                         scope: Optional[str] = None) -> List[Link]:
        """اعمال قواعد زیرپیوند بر یک دنباله Link (محدوده، استثنا، تکرار و برچسب ناوبری)"""
        current = normalize_url(url)
        excluded: Set[str] = set(exclude or ())
        scope = scope if scope is not None else default_scope(current)

        links = []
        seen = set()
        for link in candidates:
            if link.url in seen or link.url == current or link.url in excluded:
                continue
            if not in_scope(link.url, scope):
                continue
            if is_navigation_label(link.text):
                continue
            seen.add(link.url)
            links.append(link)

        return links
