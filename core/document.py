"""
ماژول واسط سند HTML برای خزشگر کتابخانه متون

طبقه‌بند صفحات فقط به این واسط وابسته است (برچسب، ویژگی‌ها، فرزندان و متن
نمایشی هر گره) و از موتور دریافت صفحه (requests یا سلنیوم) مستقل می‌ماند.
"""

from typing import Callable, Dict, Iterator, List, Optional

from bs4 import BeautifulSoup, Tag, NavigableString
from bs4.element import Comment, Declaration, Doctype, ProcessingInstruction

from core.exceptions import ParseError
from utils.text import normalize_whitespace

# تگ‌هایی که در متن نمایشی یک شکست خط ایجاد می‌کنند
BLOCK_TAGS = {
    'address', 'article', 'aside', 'blockquote', 'body', 'center', 'dd', 'div', 'dl', 'dt',
    'fieldset', 'figcaption', 'figure', 'footer', 'form', 'h1', 'h2', 'h3', 'h4', 'h5', 'h6',
    'header', 'hr', 'li', 'main', 'nav', 'ol', 'p', 'pre', 'section', 'table', 'tbody',
    'td', 'tfoot', 'th', 'thead', 'tr', 'ul',
}

# تگ‌هایی که متن نمایشی ندارند
INVISIBLE_TAGS = {'script', 'style', 'noscript', 'template', 'head', 'title', 'iframe'}

_SKIPPED_STRINGS = (Comment, Declaration, Doctype, ProcessingInstruction)


class PageNode:
    """
    یک گره فقط‌خواندنی از درخت سند

    این کلاس یک تگ BeautifulSoup را در بر می‌گیرد و تنها قابلیت‌های مورد نیاز
    طبقه‌بند را در اختیار می‌گذارد.
    """

    __slots__ = ('_tag',)

    def __init__(self, tag: Tag):
        self._tag = tag

    @property
    def tag(self) -> str:
        return self._tag.name

    @property
    def attributes(self) -> Dict[str, str]:
        return {key: self.get(key) for key in self._tag.attrs}

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """دریافت مقدار یک ویژگی (ویژگی‌های چندمقداری مانند class با فاصله به هم می‌پیوندند)"""
        value = self._tag.get(name)
        if value is None:
            return default
        if isinstance(value, (list, tuple)):
            return ' '.join(value)
        return value

    @property
    def parent(self) -> Optional['PageNode']:
        parent = self._tag.parent
        return PageNode(parent) if parent is not None else None

    @property
    def children(self) -> List['PageNode']:
        return [PageNode(child) for child in self._tag.children if isinstance(child, Tag)]

    def iter_descendants(self) -> Iterator['PageNode']:
        """پیمایش تمام گره‌های نسل به ترتیب سند"""
        for descendant in self._tag.descendants:
            if isinstance(descendant, Tag):
                yield PageNode(descendant)

    def find_all(self, names) -> List['PageNode']:
        return [PageNode(tag) for tag in self._tag.find_all(names)]

    def select(self, css_selector: str) -> List['PageNode']:
        return [PageNode(tag) for tag in self._tag.select(css_selector)]

    def find_first(self, names) -> Optional['PageNode']:
        tag = self._tag.find(names)
        return PageNode(tag) if tag is not None else None

    @property
    def text(self) -> str:
        """متن نمایشی گره؛ فاصله‌ها یکسان شده و <br> و مرز بلوک‌ها به شکست خط تبدیل شده‌اند"""
        return self.render_text()

    def render_text(self, skip: Optional[Callable[['PageNode'], bool]] = None) -> str:
        """
        تولید متن نمایشی با امکان کنار گذاشتن زیردرخت‌ها

        Args:
            skip: تابعی که برای هر گره فرزند فراخوانی می‌شود؛ اگر True برگرداند،
                  آن گره و نسل آن در متن نمی‌آیند

        Returns:
            str: خطوط غیرخالی متن که با '\\n' به هم پیوسته‌اند
        """
        parts: List[str] = []
        self._render(self._tag, parts, skip)

        lines = (normalize_whitespace(line) for line in ''.join(parts).split('\n'))
        return '\n'.join(line for line in lines if line)

    @staticmethod
    def _render(element: Tag, parts: List[str], skip) -> None:
        for child in element.children:
            if isinstance(child, NavigableString):
                if isinstance(child, _SKIPPED_STRINGS):
                    continue
                parts.append(str(child).replace('\n', ' '))
                continue

            if not isinstance(child, Tag) or child.name in INVISIBLE_TAGS:
                continue

            if skip is not None and skip(PageNode(child)):
                continue

            if child.name == 'br':
                parts.append('\n')
                continue

            is_block = child.name in BLOCK_TAGS
            if is_block:
                parts.append('\n')
            PageNode._render(child, parts, skip)
            if is_block:
                parts.append('\n')

    def __repr__(self):
        return f"<PageNode {self.tag}>"


def parse_document(html_content) -> PageNode:
    """
    ساخت درخت سند از محتوای HTML

    Args:
        html_content: محتوای HTML صفحه

    Returns:
        PageNode: گره ریشه سند

    Raises:
        ParseError: اگر محتوا خالی باشد یا قابل پردازش نباشد
    """
    if not html_content:
        raise ParseError("محتوای HTML خالی است")

    try:
        soup = BeautifulSoup(html_content, 'html.parser')
    except Exception as e:
        raise ParseError(f"خطا در پردازش HTML: {str(e)}")

    return PageNode(soup)
