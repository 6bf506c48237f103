import pytest

from core.document import parse_document
from core.exceptions import ParseError


def test_render_text_breaks_on_blocks_and_br():
    document = parse_document("<div><p>שורה א<br>שורה ב</p><p>שורה ג</p></div>")
    assert document.text.split('\n') == ["שורה א", "שורה ב", "שורה ג"]


def test_invisible_tags_are_skipped():
    document = parse_document(
        "<html><head><title>כותרת</title><style>p {}</style></head>"
        "<body><script>var x = 1;</script><p>טקסט<!-- הערה --></p></body></html>"
    )
    assert document.text == "טקסט"


def test_render_text_with_skip():
    document = parse_document("<div><h2>כותרת</h2><p>גוף</p></div>")
    div = document.find_first('div')
    assert div.render_text(skip=lambda node: node.tag == 'h2') == "גוף"


def test_attributes_and_navigation():
    document = parse_document('<div id="main" class="a b"><a href="/x">קישור</a></div>')
    div = document.find_first('div')
    assert div.get('class') == "a b"
    assert div.get('missing', 'none') == "none"
    assert [child.tag for child in div.children] == ['a']
    assert div.children[0].parent.tag == 'div'
    assert len(document.select('div a')) == 1


def test_empty_html_raises_parse_error():
    with pytest.raises(ParseError):
        parse_document("")


def test_descendants_and_attributes():
    document = parse_document('<div id="main"><p><a href="/x">קישור</a></p></div>')
    div = document.find_first('div')
    assert [node.tag for node in div.iter_descendants()] == ['p', 'a']
    assert div.attributes == {'id': 'main'}
