from core.classifier import PageClassifier
from core.surfer import LinearSurfer
from core.traversal import TraversalContext, CrawlState
from database.operations import BaseDBOperations
from models import Chapter, ScrapingError

from conftest import FakeFetcher, content_page, index_page, url


def make_book(storage):
    author_id = storage.get_or_create_author("רבי א")
    return storage.get_or_create_book(author_id, "ספר א", url("/book"))


def make_surfer(pages, storage, **kwargs):
    fetcher = FakeFetcher(pages)
    return fetcher, LinearSurfer(fetcher, PageClassifier(), storage, **kwargs)


def chapters(db):
    return BaseDBOperations(db).get_all(Chapter, limit=None, order_by=Chapter.sequence_number)


def test_surf_follows_chain_until_last_page(storage, db):
    fetcher, surfer = make_surfer({
        "/p1": content_page("פרק א", next_path="/p2"),
        "/p2": content_page("פרק ב", next_path="/p3", prev_path="/p1"),
        "/p3": content_page("פרק ג", prev_path="/p2"),
    }, storage)

    count = surfer.surf(url("/p1"), make_book(storage), "פרקים", TraversalContext())

    assert count == 3
    stored = chapters(db)
    assert [chapter.sequence_number for chapter in stored] == [1, 2, 3]
    assert [chapter.title for chapter in stored] == ["פרקים - Part 1", "פרקים - Part 2", "פרקים - Part 3"]
    assert [chapter.canonical_url for chapter in stored] == [url("/p1"), url("/p2"), url("/p3")]


def test_surf_terminates_on_cycle(storage):
    fetcher, surfer = make_surfer({
        "/p1": content_page("פרק א", next_path="/p2"),
        "/p2": content_page("פרק ב", next_path="/p1"),
    }, storage)

    assert surfer.surf(url("/p1"), make_book(storage), "פרקים", TraversalContext()) == 2
    assert fetcher.count("/p1") == 1
    assert fetcher.count("/p2") == 1


def test_surf_stops_at_globally_visited_page(storage):
    fetcher, surfer = make_surfer({
        "/p1": content_page("פרק א", next_path="/p2"),
        "/p2": content_page("פרק ב"),
    }, storage)
    context = TraversalContext()
    context.mark_visited(url("/p2"))

    assert surfer.surf(url("/p1"), make_book(storage), "פרקים", context) == 1
    assert fetcher.count("/p2") == 0


def test_surf_stops_at_non_content_page(storage):
    fetcher, surfer = make_surfer({
        "/p1": content_page("פרק א", next_path="/toc"),
        "/toc": index_page("תוכן", [("/p1", "פרק א"), ("/p9", "פרק ט")]),
    }, storage)

    assert surfer.surf(url("/p1"), make_book(storage), "פרקים", TraversalContext()) == 1
    assert fetcher.count("/toc") == 1


def test_surf_stops_on_fetch_failure_and_logs_it(storage, db):
    state = CrawlState()
    fetcher, surfer = make_surfer({
        "/p1": content_page("פרק א", next_path="/missing"),
    }, storage, state=state)

    assert surfer.surf(url("/p1"), make_book(storage), "פרקים", TraversalContext()) == 1
    assert state.stats['fetch_failures'] == 1
    errors = BaseDBOperations(db).get_all(ScrapingError)
    assert [(error.url, error.level) for error in errors] == [(url("/missing"), 'fetch')]


def test_front_matter_guard_stops_late_restart(storage):
    pages = {f"/p{i}": content_page(f"פרק {i}", next_path=f"/p{i + 1}") for i in range(1, 7)}
    pages["/p7"] = content_page("הקדמה", next_path="/p8")
    pages["/p8"] = content_page("פרק 8")
    fetcher, surfer = make_surfer(pages, storage, reset_guard_sequence=5)

    assert surfer.surf(url("/p1"), make_book(storage), "פרקים", TraversalContext()) == 6
    assert fetcher.count("/p8") == 0


def test_front_matter_guard_allows_early_introduction(storage):
    fetcher, surfer = make_surfer({
        "/p1": content_page("הקדמה", next_path="/p2"),
        "/p2": content_page("פרק א"),
    }, storage, reset_guard_sequence=5)

    assert surfer.surf(url("/p1"), make_book(storage), "פרקים", TraversalContext()) == 2


def test_surf_rerun_reuses_chapters(storage, db):
    pages = {
        "/p1": content_page("פרק א", next_path="/p2"),
        "/p2": content_page("פרק ב"),
    }
    book_id = make_book(storage)

    for _ in range(2):
        fetcher, surfer = make_surfer(pages, storage)
        assert surfer.surf(url("/p1"), book_id, "פרקים", TraversalContext()) == 2

    assert len(chapters(db)) == 2
    assert storage.stats['chapters_reused'] == 2
    assert storage.stats['segments_inserted'] == 4
