"""
ماژول پردازش متن برای خزشگر کتابخانه متون

این ماژول شامل توابع شمارش نویسه‌های خط هدف، قواعد پذیرش بندهای متن
و تشخیص برچسب‌های ناوبری و عبارات تکراری سایت است.
"""

import re
import unicodedata

# بازه‌های یونیکد خطوط قابل پشتیبانی
SCRIPT_RANGES = {
    'hebrew': '\u0590-\u05FF\uFB1D-\uFB4F',
    'arabic': '\u0600-\u06FF\u0750-\u077F\uFB50-\uFDFF\uFE70-\uFEFF',
    'latin': 'A-Za-z\u00C0-\u024F',
}

# نشانگرهای پیوند «بعدی» و «قبلی»
NEXT_MARKERS = ('הבא', 'next', 'بعدی')
PREVIOUS_MARKERS = ('הקודם', 'previous', 'prev', 'قبلی')

ARROW_CHARS = '«»‹›←→<>'

# فهرست بسته عبارات ناوبری (صفحه اصلی، فهرست مطالب و ...)
NAVIGATION_PHRASES = {
    'ראשי', 'דף הבית', 'לדף הראשי', 'עמוד ראשי', 'תוכן', 'תוכן העניינים', 'תוכן עניינים',
    'חזור', 'חזרה',
    'home', 'home page', 'contents', 'table of contents', 'toc', 'index', 'up', 'back',
    'صفحه اصلی', 'خانه', 'بازگشت', 'فهرست', 'فهرست مطالب',
}

# عبارات پانویس سراسری سایت
FOOTER_PHRASES = (
    'כל הזכויות שמורות',
    'all rights reserved',
    'تمامی حقوق',
    '©',
)

# نشانگرهای بخش مقدمه (برای تشخیص بازگشت زنجیره صفحات به ابتدای کتاب)
FRONT_MATTER_MARKERS = ('הקדמה', 'הקדמת', 'פתח דבר', 'introduction', 'preface', 'foreword', 'مقدمه', 'پیشگفتار')

FOOTNOTE_MARKER_RE = re.compile(r'[\d*\[\]()\s]+')

ARROW_ARTIFACT_RE = re.compile(
    rf'^\s*[{re.escape(ARROW_CHARS)}]+\s*[^\s{re.escape(ARROW_CHARS)}]{{0,20}}\s*[{re.escape(ARROW_CHARS)}]*\s*'
)

WHITESPACE_RE = re.compile(r'[ \t\r\f\v\u00A0\u200E\u200F]+')

# واژه‌های یک برچسب (حروف عبری و عربی نیز \w هستند)
LABEL_TOKEN_RE = re.compile(r"\w+")


def _script_class(script):
    try:
        return SCRIPT_RANGES[script]
    except KeyError:
        raise ValueError(f"خط ناشناخته: {script}")


def count_script_chars(text, script='hebrew'):
    """
    شمارش نویسه‌های خط هدف در یک متن

    Args:
        text: متن ورودی
        script: نام خط هدف (کلیدی از SCRIPT_RANGES)

    Returns:
        int: تعداد نویسه‌های متعلق به خط هدف
    """
    if not text:
        return 0
    return len(re.findall(f'[{_script_class(script)}]', text))


def has_script_char(text, script='hebrew'):
    """آیا متن حداقل یک نویسه از خط هدف دارد؟"""
    if not text:
        return False
    return re.search(f'[{_script_class(script)}]', text) is not None


def normalize_whitespace(text):
    """
    یکسان‌سازی فاصله‌های یک خط (شامل فاصله نشکن و نشانه‌های جهت)

    Args:
        text: متن ورودی

    Returns:
        str: متن با فاصله‌های یکسان‌شده
    """
    if not text:
        return ""
    text = unicodedata.normalize('NFC', text)
    return WHITESPACE_RE.sub(' ', text).strip()


def is_footnote_marker(text):
    """آیا متن فقط یک نشانگر پانویس است؟ (اعداد، ستاره و کروشه)"""
    text = (text or '').strip()
    return bool(text) and FOOTNOTE_MARKER_RE.fullmatch(text) is not None


def is_valid_segment(text, script='hebrew', min_length=2):
    """
    قاعده پذیرش یک بند متن

    نشانگرهای پانویس همیشه پذیرفته می‌شوند. سایر بندها باید حداقل طول را
    داشته باشند و شامل نویسه‌ای از خط هدف باشند.

    Args:
        text: بند متن
        script: نام خط هدف
        min_length: حداقل طول بند

    Returns:
        bool: آیا بند پذیرفته می‌شود؟
    """
    text = (text or '').strip()
    if not text:
        return False

    if is_footnote_marker(text):
        return True

    if len(text) < min_length:
        return False

    return has_script_char(text, script)


def strip_arrows(text):
    """حذف پیکان‌های ناوبری از دو سر متن"""
    return (text or '').strip().strip(ARROW_CHARS + ' ').strip()


def label_tokens(text):
    """واژه‌های کامل یک برچسب با حروف کوچک"""
    return set(LABEL_TOKEN_RE.findall((text or '').lower()))


def contains_next_marker(text):
    """آیا برچسب واژه «بعدی» را به صورت یک واژه کامل دارد؟ (הבאר یا Context نه)"""
    return not label_tokens(text).isdisjoint(NEXT_MARKERS)


def contains_previous_marker(text):
    return not label_tokens(text).isdisjoint(PREVIOUS_MARKERS)


def is_next_label(text):
    """آیا متن پیوند، پیوند «صفحه بعد» است؟"""
    return contains_next_marker(text) and not contains_previous_marker(text)


def is_navigation_label(text):
    """
    تشخیص برچسب‌های ناوبری (صفحه اصلی، قبلی، بعدی، فهرست مطالب، پیکان‌ها)

    Args:
        text: متن قابل مشاهده پیوند

    Returns:
        bool: آیا متن یک برچسب ناوبری است؟
    """
    label = strip_arrows(normalize_whitespace(text)).lower()
    if not label:
        # متن خالی یا فقط پیکان
        return True

    if label in NAVIGATION_PHRASES:
        return True

    return contains_next_marker(label) or contains_previous_marker(label)


def is_boilerplate_line(line):
    """آیا یک خط از متن، عبارت تکراری سایت (پانویس یا برچسب ناوبری) است؟"""
    lowered = line.lower().strip()
    if any(phrase in lowered for phrase in FOOTER_PHRASES):
        return True

    label = strip_arrows(lowered)
    if label in NAVIGATION_PHRASES or label in NEXT_MARKERS or label in PREVIOUS_MARKERS:
        return True

    # برچسب کوتاه «قبلی/بعدی» همراه پیکان
    has_arrow = label != lowered
    return has_arrow and len(label) <= 20 and (contains_next_marker(label) or contains_previous_marker(label))


def strip_arrow_artifact(line):
    """
    حذف باقیمانده ناوبری ابتدای خط (پیکان همراه یک برچسب کوتاه)

    فقط وقتی برچسب پس از پیکان یک برچسب ناوبری باشد حذف انجام می‌شود؛
    خطی که با نقل‌قول «...» شروع می‌شود دست‌نخورده می‌ماند.

    Args:
        line: یک خط از متن

    Returns:
        str: خط بدون باقیمانده ناوبری
    """
    if not line or line.lstrip()[:1] not in ARROW_CHARS:
        return line

    match = ARROW_ARTIFACT_RE.match(line)
    if match is None or not is_navigation_label(match.group(0)):
        return line
    return line[match.end():].strip()


def is_front_matter(title):
    """آیا عنوان صفحه نشانگر بخش مقدمه کتاب است؟"""
    lowered = (title or '').lower()
    return any(marker in lowered for marker in FRONT_MATTER_MARKERS)
