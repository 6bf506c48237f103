"""
ماژول لاگ‌گیری برای خزشگر کتابخانه متون

این ماژول یک سیستم لاگ‌گیری یکپارچه برای کل پروژه فراهم می‌کند.
"""

import os
import logging
import logging.handlers
from datetime import datetime

from config.settings import LOG_CONFIG, LOGS_DIR


def get_logger(name, log_level=None):
    """
    ایجاد و پیکربندی یک لاگر برای استفاده در ماژول‌های مختلف

    Args:
        name: نام لاگر (معمولاً نام ماژول)
        log_level: سطح لاگ‌گیری (اختیاری، پیش‌فرض از LOG_CONFIG)

    Returns:
        logging.Logger: لاگر پیکربندی شده
    """
    level_str = log_level or LOG_CONFIG['level']
    level = getattr(logging, level_str.upper(), logging.INFO)

    formatter = logging.Formatter(LOG_CONFIG['format'], LOG_CONFIG['date_format'])

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # حذف هندلرهای قبلی (برای اجتناب از تکرار)
    if logger.hasHandlers():
        logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if LOG_CONFIG['to_file']:
        os.makedirs(LOGS_DIR, exist_ok=True)
        log_file = os.path.join(LOGS_DIR, f'harvester_{datetime.now().strftime("%Y%m%d")}.log')
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=LOG_CONFIG['file_size'],
            backupCount=LOG_CONFIG['backup_count'],
            encoding='utf-8'
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_crawler_logger():
    """
    دریافت لاگر اختصاصی برای درخواست‌های خزشگر

    هر صفحه دریافت‌شده و حکم طبقه‌بندی آن در این لاگ ثبت می‌شود.

    Returns:
        logging.Logger: لاگر پیکربندی شده خزشگر
    """
    logger = get_logger('crawler')

    if LOG_CONFIG['to_file']:
        crawler_log_file = os.path.join(LOGS_DIR, f'harvester_requests_{datetime.now().strftime("%Y%m%d")}.log')
        request_handler = logging.handlers.RotatingFileHandler(
            crawler_log_file,
            maxBytes=LOG_CONFIG['file_size'],
            backupCount=10,
            encoding='utf-8'
        )
        request_handler.setFormatter(logging.Formatter('%(asctime)s [%(levelname)s] REQUEST: %(message)s'))
        logger.addHandler(request_handler)

    return logger
