from core.classifier import PageClassifier, PageVerdict
from core.content_extractor import ContentExtractor

from conftest import PROSE, SITE, content_page, index_page, url

FIVE_LETTERS = " ".join(["אבגדה"] * 30)


def block_with_links(count):
    anchors = " ".join(f'<a href="/x/{i}">{i}</a>' for i in range(1, count + 1))
    return f"<html><body><div>{FIVE_LETTERS} {anchors}</div></body></html>"


def test_dense_block_with_few_links_is_content():
    result = PageClassifier().classify_html(block_with_links(2), url("/page"))
    assert result.verdict == PageVerdict.CONTENT
    assert len(result.segments) == 1


def test_link_heavy_block_is_index():
    result = PageClassifier().classify_html(block_with_links(10), url("/page"))
    assert result.verdict == PageVerdict.INDEX
    assert [link.text for link in result.links] == [str(i) for i in range(1, 11)]


def test_page_without_text_or_links_is_empty():
    result = PageClassifier().classify_html("<html><body><p>ריק</p></body></html>", url("/page"))
    assert result.is_empty
    assert result.segments == []
    assert result.links == []


def test_classification_is_deterministic():
    html = content_page("פרק א", next_path="/book/2")
    classifier = PageClassifier()
    assert classifier.classify_html(html, url("/book/1")) == classifier.classify_html(html, url("/book/1"))


def test_content_page_segments_title_and_pagination():
    html = content_page("פרק א", next_path="/book/2", prev_path="/book/0")
    result = PageClassifier().classify_html(html, url("/book/1"))

    assert result.is_content
    assert result.title == "פרק א"
    assert result.segments == [PROSE, " ".join(["תורה"] * 30)]
    assert result.pagination_url == url("/book/2")


def test_pagination_to_self_is_ignored():
    html = content_page("פרק א", next_path="/book/1")
    result = PageClassifier().classify_html(html, url("/book/1"))
    assert result.pagination_url is None


def test_navigation_regions_are_not_candidates():
    html = (
        "<html><body>"
        f'<div class="sidebar">{PROSE} {PROSE}</div>'
        f'<div id="text"><p>{PROSE}</p></div>'
        "</body></html>"
    )
    result = PageClassifier().classify_html(html, url("/page"))
    assert result.segments == [PROSE]


def test_tie_goes_to_last_candidate():
    first = " ".join(["אאאא"] * 30)
    second = " ".join(["בבבב"] * 30)
    html = f"<html><body><section>{first}</section><section>{second}</section></body></html>"
    assert PageClassifier().classify_html(html, url("/page")).segments == [second]


def test_boilerplate_and_headings_are_removed():
    html = (
        "<html><body><div>"
        "<h1>כותרת</h1>"
        f"<p>{PROSE}</p>"
        "<p>12</p><p>*</p><p>...</p>"
        "<ul><li>רשימה</li></ul>"
        "<p>כל הזכויות שמורות</p>"
        "</div></body></html>"
    )
    result = PageClassifier().classify_html(html, url("/page"))
    assert result.segments == [PROSE, "12", "*"]


def test_sub_links_are_filtered():
    html = index_page("ספר", [
        ("/book/1", "פרק א"),
        ("/book/1#top", "פרק א שוב"),
        ("https://other.test/book", "אתר אחר"),
        ("/excluded", "קבוע"),
        ("/index", "פרק ב"),
        ("/book/2", "« הקודם"),
        ("javascript:void(0)", "פעולה"),
        ("/book/3", "פרק ג"),
    ])
    result = PageClassifier().classify_html(html, url("/index"), exclude={url("/excluded"), url("/")})

    assert result.is_index
    assert [link.url for link in result.links] == [url("/book/1"), url("/book/3")]


def test_scope_limits_sub_links():
    html = index_page("ספר", [("/books/a", "א"), ("/authors/b", "ב")])
    result = PageClassifier().classify_html(html, url("/books/"), scope=SITE + "/books/")
    assert [link.url for link in result.links] == [url("/books/a")]


def test_thresholds_are_configurable():
    classifier = PageClassifier(ContentExtractor(min_script_chars=500))
    assert classifier.classify_html(block_with_links(2), url("/page")).is_index


def test_look_alike_words_are_not_navigation():
    html = index_page("ספר", [("/well", "מעשה הבאר"), ("/p2", "פרק ב"), ("/preview", "Preview")])
    result = PageClassifier().classify_html(html, url("/index"))
    assert [link.text for link in result.links] == ["מעשה הבאר", "פרק ב", "Preview"]


def test_pagination_skips_look_alike_prose_link():
    html = content_page("פרק א", next_path="/p2",
                        paragraphs=(f'{PROSE} <a href="/well">הבאר</a>', PROSE))
    result = PageClassifier().classify_html(html, url("/p1"))
    assert result.is_content
    assert result.pagination_url == url("/p2")


def test_malformed_href_is_ignored():
    html = index_page("ספר", [("http://[broken", "שבור"), ("/p1", "פרק א")])
    result = PageClassifier().classify_html(html, url("/index"))
    assert [link.url for link in result.links] == [url("/p1")]
