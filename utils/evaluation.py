"""
ماژول evaluation:
این ماژول ابزارهای سنجش طبقه‌بند صفحات روی یک مجموعه برچسب‌خورده را فراهم می‌کند:
    - خواندن فایل فهرست نمونه‌ها (JSON شامل file، url و label)
    - اجرای طبقه‌بند روی نمونه‌ها
    - محاسبه precision و recall هر برچسب و ماتریس اغتشاش با scikit-learn
آستانه‌های طبقه‌بندی (MIN_SCRIPT_CHARS و MIN_CHARS_PER_LINK) با این ابزار تنظیم می‌شوند.
"""

import os
import json
from collections import namedtuple
from typing import Dict, List, Any

import numpy as np
from sklearn.metrics import accuracy_score, classification_report, confusion_matrix

from utils.http import decode_html
from utils.logger import get_logger

logger = get_logger(__name__)

LABELS = ('content', 'index', 'empty')

Sample = namedtuple('Sample', ['path', 'url', 'label'])


def load_manifest(manifest_path: str) -> List[Sample]:
    """
    خواندن فایل فهرست نمونه‌ها

    مسیر فایل هر نمونه نسبت به پوشه فایل فهرست سنجیده می‌شود.

    Args:
        manifest_path (str): مسیر فایل JSON

    Returns:
        list: لیست Sample ها

    Raises:
        ValueError: اگر برچسب یک نمونه نامعتبر باشد یا فیلدی کم باشد
    """
    with open(manifest_path, 'r', encoding='utf-8') as f:
        entries = json.load(f)

    base_dir = os.path.dirname(os.path.abspath(manifest_path))
    samples = []
    for index, entry in enumerate(entries):
        try:
            label = entry['label'].lower()
            path = os.path.join(base_dir, entry['file'])
            url = entry['url']
        except (KeyError, AttributeError):
            raise ValueError(f"نمونه شماره {index} باید شامل file، url و label باشد")

        if label not in LABELS:
            raise ValueError(f"برچسب نامعتبر «{label}» در نمونه شماره {index}")
        samples.append(Sample(path, url, label))

    logger.info(f"{len(samples)} نمونه از {manifest_path} بارگذاری شد")
    return samples


def read_sample_html(sample: Sample) -> str:
    """خواندن و رمزگشایی HTML یک نمونه"""
    with open(sample.path, 'rb') as f:
        return decode_html(f.read())


def predict(classifier, samples: List[Sample]) -> List[str]:
    """
    اجرای طبقه‌بند روی تمام نمونه‌ها

    Args:
        classifier: نمونه PageClassifier
        samples: لیست Sample ها

    Returns:
        list: حکم پیش‌بینی‌شده برای هر نمونه
    """
    predictions = []
    for sample in samples:
        result = classifier.classify_html(read_sample_html(sample), sample.url)
        if result.verdict != sample.label:
            logger.debug(f"{sample.url}: برچسب {sample.label}، پیش‌بینی {result.verdict}")
        predictions.append(result.verdict)
    return predictions


def compute_metrics(y_true: List[str], y_pred: List[str]) -> Dict[str, Any]:
    """
    محاسبه معیارهای ارزیابی طبقه‌بند

    Args:
        y_true: برچسب‌های واقعی
        y_pred: برچسب‌های پیش‌بینی‌شده

    Returns:
        dict: شامل accuracy، گزارش هر برچسب (precision، recall، f1، support) و ماتریس اغتشاش
    """
    labels = list(LABELS)
    report = classification_report(y_true, y_pred, labels=labels, output_dict=True, zero_division=0)
    matrix = confusion_matrix(y_true, y_pred, labels=labels)

    return {
        'accuracy': float(accuracy_score(y_true, y_pred)),
        'per_label': {label: report[label] for label in labels},
        'confusion_matrix': np.asarray(matrix).tolist(),
        'labels': labels,
    }


def format_confusion_matrix(metrics: Dict[str, Any]) -> str:
    """نمایش متنی ماتریس اغتشاش (سطرها: برچسب واقعی، ستون‌ها: پیش‌بینی)"""
    labels = metrics['labels']
    lines = ["واقعی \\ پیش‌بینی\t" + "\t".join(labels)]
    for label, row in zip(labels, metrics['confusion_matrix']):
        lines.append(f"{label}\t\t" + "\t".join(str(value) for value in row))
    return "\n".join(lines)


def log_metrics(metrics: Dict[str, Any]) -> None:
    logger.info(f"دقت کل: {metrics['accuracy']:.4f}")
    for label, values in metrics['per_label'].items():
        logger.info(f"{label}: Precision={values['precision']:.4f}, Recall={values['recall']:.4f}, "
                    f"F1={values['f1-score']:.4f}, تعداد={int(values['support'])}")
    logger.info("ماتریس اغتشاش:\n" + format_confusion_matrix(metrics))
