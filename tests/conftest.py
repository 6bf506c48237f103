"""
ابزارهای مشترک آزمون‌های خزشگر کتابخانه متون
"""

import os

# تنظیمات محیط پیش از بارگذاری ماژول‌های پروژه
os.environ['LOG_TO_FILE'] = 'false'
os.environ['DATABASE_URL'] = 'sqlite:///:memory:'
os.environ['CRAWL_DELAY'] = '0'

import pytest

from core.document import parse_document
from core.exceptions import FetchError
from core.storage import StorageManager
from database.connection import DatabaseConnection
from utils.http import normalize_url

SITE = "https://lib.test"

# ۱۲۰ نویسه عبری در هر بند
PROSE = " ".join(["שלום"] * 30)
PROSE_ALT = " ".join(["תורה"] * 30)


def url(path):
    return normalize_url(path, SITE + "/")


def content_page(heading, next_path=None, prev_path=None, paragraphs=(PROSE, PROSE_ALT)):
    """صفحه متن با بلوک اصلی و پیوندهای صفحه قبل و بعد"""
    pager = []
    if prev_path:
        pager.append(f'<a href="{prev_path}">« הקודם</a>')
    if next_path:
        pager.append(f'<a href="{next_path}">הבא »</a>')

    body = "".join(f"<p>{text}</p>" for text in paragraphs)
    return (
        "<html><head><title>ספרייה</title></head><body>"
        '<nav><a href="/">ראשי</a></nav>'
        f'<div id="content"><h2>{heading}</h2>{body}</div>'
        f'<div class="pager">{" ".join(pager)}</div>'
        "</body></html>"
    )


def index_page(heading, links):
    """صفحه فهرست: عنوان و لیست پیوندها [(مسیر، متن)]"""
    items = "".join(f'<li><a href="{path}">{text}</a></li>' for path, text in links)
    return (
        "<html><head><title>ספרייה</title></head><body>"
        '<nav><a href="/">ראשי</a></nav>'
        f"<h1>{heading}</h1><ul>{items}</ul>"
        "</body></html>"
    )


EMPTY_PAGE = "<html><body><p>ריק</p></body></html>"

ROOT = (
    "<html><body>"
    '<nav><a href="/">ראשי</a></nav>'
    '<div class="authors"><a href="/author/1">רבי א</a></div>'
    "</body></html>"
)

# سایت نمونه: یک نویسنده، یک کتاب و زنجیره چهار صفحه متن
SITE_PAGES = {
    "/": ROOT,
    "/author/1": index_page("רבי א", [("/book/1", "ספר א")]),
    "/book/1": index_page("ספר א", [("/book/1/p1", "פרק ראשון")]),
    "/book/1/p1": content_page("פרק 1", next_path="/book/1/p2"),
    "/book/1/p2": content_page("פרק 2", next_path="/book/1/p3", prev_path="/book/1/p1"),
    "/book/1/p3": content_page("פרק 3", next_path="/book/1/p4", prev_path="/book/1/p2"),
    "/book/1/p4": content_page("פרק 4", prev_path="/book/1/p3"),
}


class FakeFetcher:
    """دریافت‌کننده آزمایشی: صفحات از یک دیکشنری مسیر ← HTML خوانده می‌شوند"""

    def __init__(self, pages):
        self.pages = {url(path): html for path, html in pages.items()}
        self.fetch_counts = {}
        self.closed = False

    def fetch_document(self, page_url):
        page_url = normalize_url(page_url)
        self.fetch_counts[page_url] = self.fetch_counts.get(page_url, 0) + 1
        if page_url not in self.pages:
            raise FetchError("HTTP error! Status: 404", url=page_url, status_code=404)
        return parse_document(self.pages[page_url])

    def count(self, path):
        return self.fetch_counts.get(url(path), 0)

    def close(self):
        self.closed = True


@pytest.fixture
def db():
    DatabaseConnection.reset()
    connection = DatabaseConnection('sqlite:///:memory:')
    connection.create_tables()
    yield connection
    DatabaseConnection.reset()


@pytest.fixture
def storage(db):
    return StorageManager(db)
