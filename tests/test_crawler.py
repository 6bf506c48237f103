import pytest

from core.crawler import LibraryCrawler
from core.exceptions import SiteUnreachableError
from core.storage import StorageManager
from database.operations import BaseDBOperations
from models import Author, Book, Chapter, Segment

from conftest import ROOT, SITE, SITE_PAGES, FakeFetcher, index_page, url


def make_crawler(storage, pages=None, **kwargs):
    fetcher = FakeFetcher(pages if pages is not None else SITE_PAGES)
    crawler = LibraryCrawler(base_url=SITE + "/", storage=storage, request_manager=fetcher, **kwargs)
    return fetcher, crawler


def table_counts(db):
    ops = BaseDBOperations(db)
    return tuple(ops.count(model) for model in (Author, Book, Chapter, Segment))


def test_full_run_stores_author_book_and_chapters(storage, db):
    fetcher, crawler = make_crawler(storage)
    stats = crawler.run()

    assert table_counts(db) == (1, 1, 4, 8)

    ops = BaseDBOperations(db)
    author = ops.get_all(Author)[0]
    book = ops.get_all(Book)[0]
    assert author.name == "רבי א"
    assert author.canonical_url == url("/author/1")
    assert (book.title, book.canonical_url, book.author_id) == ("ספר א", url("/book/1"), author.id)

    stored = ops.get_all(Chapter, limit=None, order_by=Chapter.sequence_number)
    assert [chapter.sequence_number for chapter in stored] == [1, 2, 3, 4]
    assert stored[0].title == "פרק ראשון - Part 1"

    assert stats['chapters_written'] == 4
    assert stats['storage']['total_chapters'] == 4
    assert not crawler.running


def test_second_run_does_not_duplicate_rows(db):
    make_crawler(StorageManager(db))[1].run()
    first = table_counts(db)

    make_crawler(StorageManager(db))[1].run()

    assert table_counts(db) == first


def test_root_links_are_excluded_from_book_traversal(storage):
    pages = dict(SITE_PAGES)
    pages["/book/1"] = index_page("ספר א", [("/author/1", "רבי א"), ("/book/1/p1", "פרק ראשון")])
    fetcher, crawler = make_crawler(storage, pages)

    crawler.run()

    assert fetcher.count("/author/1") == 1
    assert crawler.exclusion_set == frozenset({url("/"), url("/author/1")})


def test_unreachable_root_raises(storage):
    fetcher, crawler = make_crawler(storage, pages={})
    with pytest.raises(SiteUnreachableError):
        crawler.run()
    assert not crawler.running


def test_author_link_selector_limits_authors(storage, db):
    pages = dict(SITE_PAGES)
    pages["/"] = ROOT.replace("</div>", '</div><div class="about"><a href="/about">אודות</a></div>')
    fetcher, crawler = make_crawler(storage, pages, author_link_selector="div.authors a")

    assert [link.url for link in crawler.find_author_links(crawler.load_root())] == [url("/author/1")]

    crawler.run()
    assert fetcher.count("/about") == 0


def test_failed_author_page_does_not_stop_run(storage, db):
    pages = dict(SITE_PAGES)
    pages["/"] = ROOT.replace("</div>", '<a href="/author/2">רבי ב</a></div>')
    fetcher, crawler = make_crawler(storage, pages)

    stats = crawler.run()

    assert stats['authors'] == 2
    assert stats['fetch_failures'] == 1
    assert table_counts(db)[2] == 4


def test_stop_prevents_further_authors(storage):
    fetcher, crawler = make_crawler(storage)
    crawler.running = True
    crawler.stop()
    assert not crawler.running


def test_harvest_single_book(storage, db):
    fetcher, crawler = make_crawler(storage)

    stats = crawler.harvest_single_book(url("/book/1"), "רבי א", title="ספר א")

    assert stats['books'] == 1
    assert table_counts(db) == (1, 1, 4, 8)
    assert fetcher.count("/author/1") == 0


def test_harvest_single_book_uses_page_title(storage, db):
    fetcher, crawler = make_crawler(storage)
    crawler.harvest_single_book(url("/book/1"), "רבי א")

    assert BaseDBOperations(db).get_all(Book)[0].title == "ספר א"


def test_close_releases_fetcher(storage):
    fetcher, crawler = make_crawler(storage)
    crawler.close()
    assert fetcher.closed


def test_malformed_link_on_book_page_does_not_abort_run(storage, db):
    pages = dict(SITE_PAGES)
    pages["/book/1"] = index_page("ספר א", [("http://[broken", "שבור"), ("/book/1/p1", "פרק ראשון")])
    fetcher, crawler = make_crawler(storage, pages)

    crawler.run()

    assert table_counts(db) == (1, 1, 4, 8)
