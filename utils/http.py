"""
ماژول مدیریت درخواست‌های HTTP برای خزشگر کتابخانه متون

این ماژول شامل کلاس RequestManager برای دریافت صفحات (با requests یا مرورگر
سلنیوم)، رمزگشایی محتوای صفحات با کدگذاری‌های قدیمی و نرمال‌سازی آدرس‌ها است.
"""

import time
import random
import urllib.robotparser
from urllib.parse import urlparse, urljoin, urlunparse

import requests
from requests.adapters import HTTPAdapter
from requests.packages.urllib3.util.retry import Retry
from selenium import webdriver
from selenium.webdriver.chrome.options import Options
from selenium.webdriver.common.by import By
from selenium.webdriver.support.ui import WebDriverWait
from selenium.webdriver.support import expected_conditions as EC
from selenium.common.exceptions import TimeoutException, WebDriverException

from config.settings import CRAWLER_CONFIG, CLASSIFIER_CONFIG, get_user_agent_list
from utils.logger import get_logger
from utils.text import count_script_chars

# تنظیم لاگر
logger = get_logger(__name__)

# کدگذاری‌هایی که همیشه با کدگذاری جایگزین خوانده می‌شوند
LEGACY_CHARSETS = ('windows-1255', 'iso-8859-8', 'cp1255')

REPLACEMENT_CHAR = chr(0xFFFD)


class RobotsTxtParser:
    """کلاس پردازش فایل robots.txt"""

    _instances = {}  # ذخیره‌سازی نمونه‌ها برای هر دامنه

    def __new__(cls, base_url):
        """یک نمونه برای هر دامنه"""
        parsed_url = urlparse(base_url)
        domain = f"{parsed_url.scheme}://{parsed_url.netloc}"

        if domain not in cls._instances:
            instance = super(RobotsTxtParser, cls).__new__(cls)
            instance.domain = domain
            instance.initialized = False
            cls._instances[domain] = instance

        return cls._instances[domain]

    def __init__(self, base_url):
        if self.initialized:
            return

        self.parser = urllib.robotparser.RobotFileParser()
        self.parser.set_url(urljoin(self.domain, '/robots.txt'))
        try:
            self.parser.read()
            logger.info(f"فایل robots.txt برای دامنه {self.domain} بارگذاری شد")
        except OSError as e:
            logger.error(f"خطا در بارگذاری robots.txt برای {self.domain}: {str(e)}")
            # در نبود robots.txt همه مسیرها مجاز فرض می‌شوند
            self.parser = None
        self.initialized = True

    def can_fetch(self, url, user_agent="*"):
        """
        بررسی اجازه دسترسی به یک URL

        Args:
            url: آدرس برای بررسی
            user_agent: User-Agent برای بررسی (پیش‌فرض: *)

        Returns:
            bool: آیا دسترسی مجاز است؟
        """
        if not self.parser:
            return True
        return self.parser.can_fetch(user_agent or "*", url)

    def crawl_delay(self, user_agent="*"):
        """تأخیر توصیه‌شده robots.txt برای خزش (ثانیه) یا None"""
        if not self.parser:
            return None

        delay = self.parser.crawl_delay(user_agent or "*")
        if delay:
            return float(delay)

        rrate = self.parser.request_rate(user_agent or "*")
        if rrate:
            return float(rrate.seconds) / float(rrate.requests)

        return None


def decode_html(content, content_type=None, declared_encoding=None,
                fallback_encoding=None, script=None):
    """
    رمزگشایی بایت‌های صفحه با درنظرگرفتن کدگذاری‌های قدیمی

    اگر کدگذاری اعلام‌شده windows-1255 یا iso-8859-8 باشد، محتوا مستقیماً با
    کدگذاری جایگزین خوانده می‌شود. در غیر این صورت ابتدا UTF-8 (یا کدگذاری
    اعلام‌شده) امتحان می‌شود و اگر متن حاصل نویسه جایگزین داشته باشد یا هیچ
    نویسه‌ای از خط هدف نداشته باشد، کدگذاری جایگزین امتحان می‌شود.

    Args:
        content: بایت‌های پاسخ
        content_type: مقدار سرآیند Content-Type
        declared_encoding: کدگذاری اعلام‌شده توسط سرور (اختیاری)
        fallback_encoding: کدگذاری جایگزین (پیش‌فرض: cp1255)
        script: خط هدف

    Returns:
        str: متن رمزگشایی‌شده
    """
    if content is None:
        return None
    if isinstance(content, str):
        return content

    fallback_encoding = fallback_encoding or CRAWLER_CONFIG['fallback_encoding']
    script = script or CLASSIFIER_CONFIG['target_script']

    declared = (declared_encoding or '').lower()
    content_type = (content_type or '').lower()
    if declared in LEGACY_CHARSETS or any(f"charset={name}" in content_type for name in LEGACY_CHARSETS):
        return content.decode(fallback_encoding, errors='replace')

    primary = declared if declared and declared != 'iso-8859-1' else 'utf-8'
    try:
        text = content.decode(primary, errors='replace')
    except LookupError:
        text = content.decode('utf-8', errors='replace')

    if REPLACEMENT_CHAR not in text and count_script_chars(text, script) > 0:
        return text

    alternative = content.decode(fallback_encoding, errors='replace')
    if count_script_chars(alternative, script) > count_script_chars(text, script):
        logger.debug(f"محتوا با کدگذاری {fallback_encoding} رمزگشایی شد")
        return alternative

    return text


class RequestManager:
    """کلاس مدیریت درخواست‌های HTTP"""

    def __init__(self, base_url=None, default_delay=None, respect_robots=None, use_selenium=None,
                 timeout=None, page_load_timeout=None):
        """
        مقداردهی اولیه مدیریت درخواست‌ها

        Args:
            base_url: آدرس پایه وبسایت (اختیاری)
            default_delay: تأخیر پیش‌فرض بین درخواست‌ها (ثانیه)
            respect_robots: آیا محدودیت‌های robots.txt رعایت شود؟
            use_selenium: آیا از سلنیوم برای بارگذاری صفحات استفاده شود؟
            timeout: محدودیت زمانی درخواست‌های requests (ثانیه)
            page_load_timeout: محدودیت زمانی بارگذاری صفحه در سلنیوم (ثانیه)
        """
        self.base_url = base_url
        self.default_delay = float(default_delay if default_delay is not None
                                   else CRAWLER_CONFIG['politeness_delay'])
        self.respect_robots = (respect_robots if respect_robots is not None
                               else CRAWLER_CONFIG['respect_robots'])
        self.use_selenium = use_selenium if use_selenium is not None else CRAWLER_CONFIG['use_selenium']
        self.timeout = timeout or CRAWLER_CONFIG['timeout']
        self.page_load_timeout = page_load_timeout or CRAWLER_CONFIG['page_load_timeout']
        self.last_request_time = 0
        self.user_agents = get_user_agent_list()

        # ایجاد نشست HTTP
        self.session = self._create_session()

        # پردازنده robots.txt در صورت نیاز
        self.robots_parser = None
        if self.respect_robots and self.base_url:
            self.robots_parser = RobotsTxtParser(self.base_url)

        # راه‌اندازی سلنیوم در صورت نیاز
        self.driver = None
        if self.use_selenium:
            self._setup_selenium()

    def _create_session(self):
        """
        ایجاد یک نشست HTTP با قابلیت تلاش مجدد

        Returns:
            requests.Session: نشست HTTP
        """
        session = requests.Session()

        retry_strategy = Retry(
            total=3,
            backoff_factor=1,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["HEAD", "GET"]
        )

        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)

        session.headers.update({"User-Agent": self._get_random_user_agent()})

        return session

    def _setup_selenium(self):
        """راه‌اندازی مرورگر سلنیوم بدون رابط گرافیکی"""
        try:
            chrome_options = Options()
            chrome_options.add_argument("--headless=new")
            chrome_options.add_argument("--no-sandbox")
            chrome_options.add_argument("--disable-dev-shm-usage")
            chrome_options.add_argument(f"user-agent={self._get_random_user_agent()}")

            self.driver = webdriver.Chrome(options=chrome_options)
            self.driver.set_page_load_timeout(self.page_load_timeout)
            logger.info("مرورگر سلنیوم با موفقیت راه‌اندازی شد")
        except WebDriverException as e:
            logger.error(f"خطا در راه‌اندازی سلنیوم: {str(e)}")
            self.use_selenium = False

    def _get_random_user_agent(self):
        return random.choice(self.user_agents)

    def _respect_crawl_delay(self, url=None, user_agent=None):
        """
        رعایت تأخیر مناسب بین درخواست‌ها

        Args:
            url: آدرس درخواست (برای بررسی robots.txt)
            user_agent: User-Agent استفاده شده
        """
        delay = self.default_delay

        if self.robots_parser and url:
            robots_delay = self.robots_parser.crawl_delay(user_agent)
            if robots_delay:
                delay = max(delay, robots_delay)

        elapsed = time.time() - self.last_request_time
        wait_time = max(0, delay - elapsed)

        if wait_time > 0:
            logger.debug(f"انتظار {wait_time:.2f} ثانیه برای رعایت محدودیت خزش")
            time.sleep(wait_time)

        self.last_request_time = time.time()

    def _check_robots_permission(self, url, user_agent):
        if not self.respect_robots or not self.robots_parser:
            return True
        return self.robots_parser.can_fetch(url, user_agent)

    @staticmethod
    def _error_response(url, error):
        return {
            'html': None,
            'url': url,
            'status_code': None,
            'error': error,
            'headers': None,
        }

    def get(self, url):
        """
        ارسال درخواست GET

        Args:
            url: آدرس درخواست

        Returns:
            dict: شیء پاسخ شامل 'html', 'url', 'status_code' و در صورت خطا 'error'
        """
        user_agent = self._get_random_user_agent()
        self.session.headers.update({"User-Agent": user_agent})

        if not self._check_robots_permission(url, user_agent):
            logger.warning(f"دسترسی به {url} توسط robots.txt منع شده است")
            return self._error_response(url, 'Disallowed by robots.txt')

        try:
            if self.use_selenium and self.driver:
                return self._get_with_selenium(url)

            # تأخیر فقط برای درخواست‌های مستقیم
            self._respect_crawl_delay(url, user_agent)
            return self._get_with_requests(url)
        except requests.RequestException as e:
            logger.error(f"خطا در ارسال درخواست به {url}: {str(e)}")
            return self._error_response(url, str(e))

    def _get_with_requests(self, url):
        """
        ارسال درخواست GET با کتابخانه requests

        Returns:
            dict: شیء پاسخ
        """
        logger.info(f"ارسال درخواست GET به {url}")

        start_time = time.time()
        response = self.session.get(url, timeout=self.timeout)
        response_time = time.time() - start_time

        logger.info(f"دریافت پاسخ از {url} با کد وضعیت {response.status_code} در {response_time:.2f} ثانیه")

        return {
            'html': self._decode_response(response),
            'url': response.url,
            'status_code': response.status_code,
            'headers': dict(response.headers),
            'response_time': response_time,
        }

    def _decode_response(self, response):
        return decode_html(
            response.content,
            content_type=response.headers.get('Content-Type'),
            declared_encoding=response.encoding,
        )

    def _get_with_selenium(self, url):
        """
        بارگذاری صفحه با سلنیوم

        Args:
            url: آدرس صفحه

        Returns:
            dict: شیء پاسخ
        """
        logger.info(f"بارگذاری {url} با سلنیوم")

        start_time = time.time()

        try:
            self.driver.get(url)

            # انتظار برای بارگذاری بدنه صفحه
            WebDriverWait(self.driver, 10).until(
                EC.presence_of_element_located((By.TAG_NAME, "body"))
            )

            response_time = time.time() - start_time
            logger.info(f"بارگذاری {url} با سلنیوم در {response_time:.2f} ثانیه")

            return {
                'html': self.driver.page_source,
                'url': self.driver.current_url,
                'status_code': 200,  # سلنیوم کد وضعیت را ارائه نمی‌دهد
                'headers': {},
                'response_time': response_time,
            }

        except TimeoutException:
            logger.error(f"زمان بارگذاری {url} با سلنیوم به پایان رسید")
            return self._error_response(url, 'Timeout')
        except WebDriverException as e:
            logger.error(f"خطا در بارگذاری {url} با سلنیوم: {str(e)}")
            return self._error_response(url, str(e))

    def fetch_document(self, url):
        """
        دریافت صفحه و ساخت درخت سند آن

        Args:
            url: آدرس صفحه

        Returns:
            PageNode: گره ریشه سند

        Raises:
            FetchError: اگر صفحه دریافت نشود یا کد وضعیت ناموفق باشد
            ParseError: اگر محتوای صفحه قابل پردازش نباشد
        """
        from core.document import parse_document
        from core.exceptions import FetchError

        result = self.get(url)

        if result.get('error'):
            raise FetchError(result['error'], url=url, status_code=result.get('status_code'))

        status_code = result.get('status_code')
        if status_code is not None and status_code >= 400:
            raise FetchError(f"HTTP error! Status: {status_code}", url=url, status_code=status_code)

        return parse_document(result.get('html'))

    def close(self):
        """بستن نشست و آزادسازی منابع"""
        self.session.close()

        if self.driver:
            try:
                self.driver.quit()
                logger.info("مرورگر سلنیوم با موفقیت بسته شد")
            except WebDriverException as e:
                logger.error(f"خطا در بستن مرورگر سلنیوم: {str(e)}")
            self.driver = None


def normalize_url(url, base_url=None):
    """
    نرمال‌سازی یک URL

    آدرس نسبی نسبت به base_url مطلق می‌شود، طرح و میزبان با حروف کوچک نوشته
    می‌شوند و بخش fragment حذف می‌شود. رشته پرس‌وجو حفظ می‌شود.

    Args:
        url: آدرس برای نرمال‌سازی
        base_url: آدرس پایه برای URL‌های نسبی

    Returns:
        str: URL نرمال‌سازی شده
    """
    url = (url or '').strip()

    if base_url and not url.startswith(('http://', 'https://')):
        url = urljoin(base_url, url)

    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        return url.split('#', 1)[0]

    path = parsed.path or '/'
    return urlunparse((parsed.scheme.lower(), parsed.netloc.lower(), path, parsed.params, parsed.query, ''))
