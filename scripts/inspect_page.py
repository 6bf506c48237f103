#!/usr/bin/env python
"""
اسکریپت بررسی یک صفحه برای خزشگر کتابخانه متون

این اسکریپت طبقه‌بند صفحات را روی یک آدرس اجرا می‌کند بدون آنکه چیزی در
پایگاه داده ذخیره شود:
    links URL    فهرست زیرپیوندهای صفحه
    content URL  حکم صفحه، عنوان، پیوند صفحه بعد و بندهای متن
با گزینه --save محتوای HTML رمزگشایی‌شده در فایل ذخیره می‌شود.
"""

import os
import sys
import json
import argparse
from dotenv import load_dotenv

# افزودن مسیر پروژه به سیستم
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# بارگذاری متغیرهای محیطی
load_dotenv()

from core.classifier import PageClassifier
from core.content_extractor import default_scope
from core.document import parse_document
from core.exceptions import HarvestError
from utils.http import RequestManager, normalize_url
from utils.logger import get_logger

# تنظیم لاگر
logger = get_logger("inspect_page")


def parse_arguments(argv=None):
    parser = argparse.ArgumentParser(description="بررسی طبقه‌بندی یک صفحه بدون ذخیره‌سازی")
    parser.add_argument('command', choices=['links', 'content'], help="نوع خروجی")
    parser.add_argument('url', type=str, help="آدرس صفحه")
    parser.add_argument('--scope', type=str, default=None,
                        help="پیشوند آدرس‌های مجاز برای زیرپیوندها (پیش‌فرض: میزبان صفحه)")
    parser.add_argument('--exclude-root', type=str, default=None,
                        help="آدرس صفحه ریشه‌ای که پیوندهایش کنار گذاشته شوند")
    parser.add_argument('--save', type=str, default=None, metavar='FILE',
                        help="ذخیره HTML رمزگشایی‌شده در فایل")
    parser.add_argument('--use-selenium', action='store_true', help="بارگذاری صفحه با سلنیوم")
    return parser.parse_args(argv)


def fetch_html(manager, url):
    """
    دریافت HTML رمزگشایی‌شده یک صفحه

    Raises:
        HarvestError: اگر صفحه دریافت نشود
    """
    response = manager.get(url)
    if response.get('error') or not response.get('html'):
        raise HarvestError(f"دریافت {url} ناموفق بود: {response.get('error') or response.get('status_code')}",
                           url=url)
    if response.get('status_code') and response['status_code'] >= 400:
        raise HarvestError(f"دریافت {url} ناموفق بود: HTTP {response['status_code']}", url=url)
    return response['html']


def inspect(manager, command, url, scope=None, exclude_root=None, save=None, classifier=None):
    """
    اجرای طبقه‌بند روی یک صفحه

    Returns:
        dict: خروجی قابل نمایش
    """
    classifier = classifier or PageClassifier()
    url = normalize_url(url)

    html = fetch_html(manager, url)
    if save:
        with open(save, 'w', encoding='utf-8') as f:
            f.write(html)
        logger.info(f"محتوای HTML در {save} ذخیره شد")

    exclude = set()
    if exclude_root:
        root_html = fetch_html(manager, normalize_url(exclude_root))
        exclude = set(classifier.extractor.extract_all_links(parse_document(root_html), exclude_root))

    document = parse_document(html)
    if command == 'links':
        links = classifier.extractor.extract_sub_links(document, url, exclude=exclude,
                                                       scope=scope or default_scope(url))
        return {'url': url, 'links': [{'url': link.url, 'text': link.text} for link in links]}

    result = classifier.classify(document, url, exclude=exclude, scope=scope)
    output = result.to_dict()
    output.pop('links')
    output['link_count'] = len(result.links)
    return output


def main(argv=None):
    args = parse_arguments(argv)

    manager = RequestManager(base_url=args.url, use_selenium=args.use_selenium)
    try:
        output = inspect(manager, args.command, args.url, scope=args.scope,
                         exclude_root=args.exclude_root, save=args.save)
    except HarvestError as e:
        logger.error(str(e))
        return 1
    finally:
        manager.close()

    print(json.dumps(output, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
