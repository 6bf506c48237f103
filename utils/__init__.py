"""
پکیج utils:
این پکیج شامل توابع و ابزارهای کمکی برای پروژه خزشگر کتابخانه متون می‌باشد.
ماژول‌های موجود در این پوشه عبارتند از:
    - logger: سیستم لاگ‌گیری یکپارچه
    - http: دریافت صفحات (requests یا سلنیوم)، رمزگشایی کدگذاری‌های قدیمی و نرمال‌سازی آدرس‌ها
    - text: شمارش نویسه‌های خط هدف، قواعد پذیرش بندها و تشخیص برچسب‌های ناوبری
    - evaluation: سنجش طبقه‌بند صفحات روی مجموعه برچسب‌خورده
"""

from .logger import get_logger, get_crawler_logger
from .http import RequestManager, RobotsTxtParser, decode_html, normalize_url
from .text import (
    count_script_chars,
    has_script_char,
    normalize_whitespace,
    is_valid_segment,
    is_navigation_label,
    is_next_label,
    is_front_matter,
)
from .evaluation import load_manifest, compute_metrics

__all__ = [
    "get_logger",
    "get_crawler_logger",
    "RequestManager",
    "RobotsTxtParser",
    "decode_html",
    "normalize_url",
    "count_script_chars",
    "has_script_char",
    "normalize_whitespace",
    "is_valid_segment",
    "is_navigation_label",
    "is_next_label",
    "is_front_matter",
    "load_manifest",
    "compute_metrics"
]
