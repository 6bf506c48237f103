"""
پکیج core:
این پکیج شامل ماژول‌های اصلی خزشگر کتابخانه متون است که وظایف زیر را پوشش می‌دهد:
    - واسط فقط‌خواندنی سند HTML (document)
    - انتخاب بلوک اصلی متن و استخراج بندها و پیوندها (content_extractor)
    - طبقه‌بندی صفحات به متن، فهرست یا خالی (classifier)
    - ذخیره‌سازی تکرارپذیر نویسنده، کتاب، فصل و بند (storage)
    - پیمایش خطی زنجیره صفحات متن (surfer)
    - پیمایش بازگشتی صفحات فهرست (driller)
    - هماهنگی کل خزش از صفحه ریشه (crawler)
"""

from .exceptions import HarvestError, FetchError, ParseError, SiteUnreachableError
from .document import PageNode, parse_document
from .content_extractor import ContentExtractor, Link
from .classifier import PageClassifier, PageVerdict, ClassificationResult
from .storage import StorageManager
from .traversal import TraversalContext, CrawlState, PageVisitor
from .surfer import LinearSurfer
from .driller import RecursiveDriller
from .crawler import LibraryCrawler

__all__ = [
    "HarvestError",
    "FetchError",
    "ParseError",
    "SiteUnreachableError",
    "PageNode",
    "parse_document",
    "ContentExtractor",
    "Link",
    "PageClassifier",
    "PageVerdict",
    "ClassificationResult",
    "StorageManager",
    "TraversalContext",
    "CrawlState",
    "PageVisitor",
    "LinearSurfer",
    "RecursiveDriller",
    "LibraryCrawler"
]
