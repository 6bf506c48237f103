from core.classifier import PageClassifier
from core.driller import RecursiveDriller, base_title_from_breadcrumb
from core.traversal import TraversalContext, CrawlState
from database.operations import BaseDBOperations
from models import Chapter, ScrapingError

from conftest import EMPTY_PAGE, FakeFetcher, content_page, index_page, url


def make_book(storage):
    author_id = storage.get_or_create_author("רבי א")
    return storage.get_or_create_book(author_id, "ספר א", url("/book"))


def make_driller(pages, storage, **kwargs):
    fetcher = FakeFetcher(pages)
    return fetcher, RecursiveDriller(fetcher, PageClassifier(), storage, **kwargs)


def test_base_title_from_breadcrumb():
    assert base_title_from_breadcrumb(["ספר", "חלק א", "פרק ב"]) == "חלק א / פרק ב"
    assert base_title_from_breadcrumb(["ספר"]) == "ספר"
    assert base_title_from_breadcrumb([]) == ""


def test_drill_skips_previously_visited_sub_links(storage):
    links = [(f"/sub/{i}", f"חלק {i}") for i in range(1, 6)]
    fetcher, driller = make_driller(
        dict([("/index", index_page("ספר", links))] + [(path, EMPTY_PAGE) for path, _ in links]),
        storage,
    )
    context = TraversalContext()
    context.mark_visited(url("/sub/3"))

    driller.drill(url("/index"), make_book(storage), ["ספר"], context)

    assert fetcher.count("/sub/3") == 0
    assert sum(fetcher.count(path) for path, _ in links) == 4


def test_drill_terminates_on_cyclic_index_graph(storage):
    fetcher, driller = make_driller({
        "/a": index_page("א", [("/b", "ב")]),
        "/b": index_page("ב", [("/a", "א"), ("/c", "ג")]),
        "/c": index_page("ג", [("/a", "א"), ("/b", "ב")]),
    }, storage)

    assert driller.drill(url("/a"), make_book(storage), ["ספר"], TraversalContext()) == 0
    assert [fetcher.count(path) for path in ("/a", "/b", "/c")] == [1, 1, 1]


def test_drill_hands_content_to_surfer_with_breadcrumb_title(storage, db):
    state = CrawlState()
    fetcher, driller = make_driller({
        "/book": index_page("ספר א", [("/part/1", "חלק א")]),
        "/part/1": index_page("חלק א", [("/p1", "פרק ראשון")]),
        "/p1": content_page("פרק ראשון", next_path="/p2"),
        "/p2": content_page("פרק שני"),
    }, storage, state=state)

    assert driller.drill(url("/book"), make_book(storage), ["ספר א"], TraversalContext()) == 2

    stored = BaseDBOperations(db).get_all(Chapter, limit=None)
    assert [chapter.title for chapter in stored] == [
        "חלק א / פרק ראשון - Part 1",
        "חלק א / פרק ראשון - Part 2",
    ]
    assert fetcher.count("/p1") == 1
    assert state.stats['chapters_written'] == 2
    assert state.stats['index_pages'] == 2


def test_drill_continues_after_failed_branch(storage):
    state = CrawlState()
    fetcher, driller = make_driller({
        "/book": index_page("ספר", [("/missing", "חסר"), ("/p1", "פרק")]),
        "/p1": content_page("פרק"),
    }, storage, state=state)
    context = TraversalContext()

    assert driller.drill(url("/book"), make_book(storage), ["ספר"], context) == 1
    assert context.was_visited(url("/missing"))
    assert state.failures == 1


def test_drill_respects_max_depth(storage):
    fetcher, driller = make_driller({
        "/d0": index_page("0", [("/d1", "1")]),
        "/d1": index_page("1", [("/d2", "2")]),
        "/d2": index_page("2", [("/d3", "3")]),
    }, storage, max_depth=1)

    driller.drill(url("/d0"), make_book(storage), ["ספר"], TraversalContext())

    assert fetcher.count("/d1") == 1
    assert fetcher.count("/d2") == 0


class FailingClassifier(PageClassifier):
    """طبقه‌بندی که روی یک آدرس مشخص خطا می‌دهد"""

    def __init__(self, failing_url):
        super().__init__()
        self.failing_url = failing_url

    def classify(self, document, url, exclude=None, scope=None):
        if url == self.failing_url:
            raise RuntimeError("classification failed")
        return super().classify(document, url, exclude=exclude, scope=scope)


def test_classification_error_ends_only_its_branch(storage, db):
    state = CrawlState()
    fetcher = FakeFetcher({
        "/book": index_page("ספר", [("/bad", "חלק רע"), ("/p1", "פרק")]),
        "/bad": index_page("חלק רע", [("/p9", "פרק ט")]),
        "/p1": content_page("פרק"),
    })
    driller = RecursiveDriller(fetcher, FailingClassifier(url("/bad")), storage, state=state)

    assert driller.drill(url("/book"), make_book(storage), ["ספר"], TraversalContext()) == 1
    assert state.stats['parse_failures'] == 1
    errors = BaseDBOperations(db).get_all(ScrapingError)
    assert [(error.url, error.level) for error in errors] == [(url("/bad"), 'parse')]
