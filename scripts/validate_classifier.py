#!/usr/bin/env python
"""
اسکریپت سنجش آستانه‌های طبقه‌بند صفحات

ورودی یک فایل JSON شامل لیستی از نمونه‌ها به شکل
    {"file": "pages/a.html", "url": "https://...", "label": "content"}
است (برچسب‌ها: content، index، empty). خروجی precision و recall هر برچسب و
ماتریس اغتشاش است. آستانه‌ها را می‌توان از خط فرمان تغییر داد تا اثر آن‌ها
پیش از تغییر تنظیمات سنجیده شود.
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

from config.settings import CLASSIFIER_CONFIG
from core.classifier import PageClassifier
from core.content_extractor import ContentExtractor
from utils.evaluation import load_manifest, predict, compute_metrics, log_metrics
from utils.logger import get_logger

# تنظیم لاگر
logger = get_logger("validate_classifier")


def parse_arguments(argv=None):
    parser = argparse.ArgumentParser(description="سنجش طبقه‌بند صفحات روی مجموعه برچسب‌خورده")
    parser.add_argument('manifest', type=str, help="مسیر فایل JSON نمونه‌ها")
    parser.add_argument('--min-script-chars', type=int, default=CLASSIFIER_CONFIG['min_script_chars'],
                        help=f"آستانه T1 (پیش‌فرض: {CLASSIFIER_CONFIG['min_script_chars']})")
    parser.add_argument('--min-chars-per-link', type=float, default=CLASSIFIER_CONFIG['min_chars_per_link'],
                        help=f"آستانه T2 (پیش‌فرض: {CLASSIFIER_CONFIG['min_chars_per_link']})")
    parser.add_argument('--script', type=str, default=CLASSIFIER_CONFIG['target_script'],
                        help="خط هدف (hebrew، arabic، latin)")
    parser.add_argument('--output', type=str, default=None, help="ذخیره معیارها در فایل JSON")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_arguments(argv)

    try:
        samples = load_manifest(args.manifest)
    except (OSError, ValueError) as e:
        logger.error(f"خطا در خواندن فایل نمونه‌ها: {str(e)}")
        return 1

    if not samples:
        logger.error("هیچ نمونه‌ای در فایل وجود ندارد")
        return 1

    classifier = PageClassifier(ContentExtractor(
        min_script_chars=args.min_script_chars,
        min_chars_per_link=args.min_chars_per_link,
        script=args.script,
    ))
    logger.info(f"آستانه‌ها: T1={args.min_script_chars}, T2={args.min_chars_per_link}, خط={args.script}")

    try:
        predictions = predict(classifier, samples)
    except OSError as e:
        logger.error(f"خطا در خواندن نمونه: {str(e)}")
        return 1

    metrics = compute_metrics([sample.label for sample in samples], predictions)
    log_metrics(metrics)

    if args.output:
        with open(args.output, 'w', encoding='utf-8') as f:
            json.dump(metrics, f, ensure_ascii=False, indent=2)
        logger.info(f"معیارها در {args.output} ذخیره شدند")

    return 0


if __name__ == "__main__":
    sys.exit(main())
