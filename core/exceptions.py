"""
ماژول خطاهای خزشگر کتابخانه متون

خطاهای دریافت و پردازش صفحه فقط شاخه جاری پیمایش را متوقف می‌کنند؛
تنها خطای کشنده، در دسترس نبودن صفحه ریشه سایت در شروع کار است.
"""


class HarvestError(Exception):
    """کلاس پایه خطاهای خزشگر"""

    def __init__(self, message, url=None):
        super().__init__(message)
        self.url = url


class FetchError(HarvestError):
    """خطای دریافت صفحه (شبکه، اتمام زمان، کد وضعیت ناموفق یا منع robots.txt)"""

    def __init__(self, message, url=None, status_code=None):
        super().__init__(message, url)
        self.status_code = status_code


class ParseError(HarvestError):
    """خطای پردازش HTML (درخت DOM در دسترس نیست)"""


class SiteUnreachableError(HarvestError):
    """صفحه ریشه سایت قابل دریافت نیست"""
