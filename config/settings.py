"""
ماژول تنظیمات برای خزشگر کتابخانه متون

این ماژول حاوی تنظیمات و پیکربندی‌های پیش‌فرض برای کل پروژه است و مسئول
بارگذاری و مدیریت تنظیمات از فایل .env و متغیرهای محیطی است.
"""

import os
import json
from pathlib import Path
from dotenv import load_dotenv

# بارگذاری متغیرهای محیطی از فایل .env
load_dotenv()

# مسیرهای پایه پروژه
BASE_DIR = Path(__file__).resolve().parent.parent
CONFIG_DIR = os.path.join(BASE_DIR, 'config')
LOGS_DIR = os.path.join(BASE_DIR, 'logs')


def _env_flag(name, default='False'):
    return os.getenv(name, default).lower() in ('true', '1', 't', 'yes')


# تنظیمات پایگاه داده
DB_CONFIG = {
    'url': os.getenv('DATABASE_URL'),
    'host': os.getenv('DB_HOST', 'localhost'),
    'port': int(os.getenv('DB_PORT', 3306)),
    'user': os.getenv('DB_USER', 'root'),
    'password': os.getenv('DB_PASSWORD', ''),
    'name': os.getenv('DB_NAME', 'library_harvester'),
    'charset': 'utf8mb4',
    'pool_size': int(os.getenv('DB_POOL_SIZE', 5)),
    'max_overflow': int(os.getenv('DB_MAX_OVERFLOW', 10)),
    'pool_recycle': int(os.getenv('DB_POOL_RECYCLE', 3600)),
}

# تنظیمات لاگ‌گیری
LOG_CONFIG = {
    'level': os.getenv('LOG_LEVEL', 'INFO'),
    'format': '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
    'date_format': '%Y-%m-%d %H:%M:%S',
    'file_size': int(os.getenv('LOG_FILE_SIZE', 10 * 1024 * 1024)),  # 10 مگابایت
    'backup_count': int(os.getenv('LOG_BACKUP_COUNT', 5)),
    'to_file': _env_flag('LOG_TO_FILE', 'True'),
}

# تنظیمات خزشگر
CRAWLER_CONFIG = {
    'base_url': os.getenv('BASE_URL', 'https://chabadlibrary.org/books/'),
    'max_depth': int(os.getenv('MAX_DEPTH', 10)),
    'reset_guard_sequence': int(os.getenv('RESET_GUARD_SEQUENCE', 5)),
    'politeness_delay': float(os.getenv('CRAWL_DELAY', 1.0)),
    'timeout': int(os.getenv('REQUEST_TIMEOUT', 30)),
    'page_load_timeout': int(os.getenv('PAGE_LOAD_TIMEOUT', 60)),
    'use_selenium': _env_flag('USE_SELENIUM'),
    'respect_robots': _env_flag('RESPECT_ROBOTS'),
    'fallback_encoding': os.getenv('FALLBACK_ENCODING', 'cp1255'),
    'author_link_selector': os.getenv('AUTHOR_LINK_SELECTOR') or None,
}

# آستانه‌های تجربی طبقه‌بندی صفحات
# این مقادیر با scripts/validate_classifier.py روی مجموعه برچسب‌خورده سنجیده می‌شوند
CLASSIFIER_CONFIG = {
    'min_script_chars': int(os.getenv('MIN_SCRIPT_CHARS', 100)),  # T1
    'min_chars_per_link': float(os.getenv('MIN_CHARS_PER_LINK', 40)),  # T2
    'min_segment_length': int(os.getenv('MIN_SEGMENT_LENGTH', 2)),
    'target_script': os.getenv('TARGET_SCRIPT', 'hebrew'),
}


def get_user_agent_list():
    """
    دریافت لیست User-Agent ها از فایل پیکربندی یا مقادیر پیش‌فرض

    Returns:
        list: لیست User-Agent ها
    """
    user_agents_path = os.path.join(CONFIG_DIR, 'user_agents.json')

    default_user_agents = [
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:125.0) Gecko/20100101 Firefox/125.0",
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.4 Safari/605.1.15",
        "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
    ]

    if not os.path.exists(user_agents_path):
        return default_user_agents

    try:
        with open(user_agents_path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        print(f"خطا در بارگذاری لیست User-Agent ها: {str(e)}")
        return default_user_agents


def get_connection_string():
    """
    ایجاد رشته اتصال پایگاه داده بر اساس تنظیمات

    اگر DATABASE_URL تنظیم شده باشد همان استفاده می‌شود، در غیر این صورت
    رشته اتصال MySQL از اجزای DB_CONFIG ساخته می‌شود.

    Returns:
        str: رشته اتصال SQLAlchemy
    """
    if DB_CONFIG['url']:
        return DB_CONFIG['url']

    return (f"mysql+pymysql://{DB_CONFIG['user']}:{DB_CONFIG['password']}@"
            f"{DB_CONFIG['host']}:{DB_CONFIG['port']}/{DB_CONFIG['name']}?"
            f"charset={DB_CONFIG['charset']}")
