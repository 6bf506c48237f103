from utils.text import (
    count_script_chars,
    is_boilerplate_line,
    is_front_matter,
    is_navigation_label,
    is_next_label,
    is_valid_segment,
    normalize_whitespace,
    strip_arrow_artifact,
)


def test_count_script_chars_counts_only_target_script():
    assert count_script_chars("שלום world 123") == 4
    assert count_script_chars("hello", script='latin') == 5
    assert count_script_chars("") == 0


def test_normalize_whitespace_collapses_non_breaking_space():
    nbsp = chr(0xA0)
    assert normalize_whitespace(f"  שלום{nbsp}{nbsp}עולם \t ") == "שלום עולם"


def test_footnote_markers_are_always_segments():
    assert is_valid_segment("12")
    assert is_valid_segment("*")
    assert is_valid_segment("[3]")


def test_segments_need_length_and_hebrew():
    assert is_valid_segment("שלום עולם")
    assert not is_valid_segment("א")
    assert not is_valid_segment("...")
    assert not is_valid_segment("!")
    assert not is_valid_segment("hello world")
    assert not is_valid_segment("   ")


def test_next_label_ignores_combined_pager():
    assert is_next_label("הבא »")
    assert is_next_label("Next page")
    assert not is_next_label("« הקודם")
    assert not is_next_label("הקודם | הבא")


def test_navigation_labels():
    assert is_navigation_label("ראשי")
    assert is_navigation_label("« הקודם")
    assert is_navigation_label("»")
    assert not is_navigation_label("פרק ראשון")


def test_boilerplate_lines():
    assert is_boilerplate_line("כל הזכויות שמורות לספרייה")
    assert is_boilerplate_line("תוכן העניינים")
    assert is_boilerplate_line("הבא »")
    assert not is_boilerplate_line("הבא לטהר מסייעין אותו")


def test_strip_arrow_artifact():
    assert strip_arrow_artifact("« חזור פרק א") == "פרק א"
    assert strip_arrow_artifact("פרק א") == "פרק א"


def test_front_matter_titles():
    assert is_front_matter("הקדמה")
    assert is_front_matter("Preface to the second edition")
    assert not is_front_matter("פרק ב")


def test_markers_match_whole_words_only():
    assert not is_next_label("הבאר")
    assert not is_navigation_label("מעשה הבאר")
    assert not is_navigation_label("Preview")
    assert not is_navigation_label("Context")
    assert is_next_label("לדף הבא")
    assert is_navigation_label("Previous chapter")


def test_quotation_at_line_start_is_kept():
    assert strip_arrow_artifact("«שלום» אמר המלך") == "«שלום» אמר המלך"
    assert strip_arrow_artifact("«سلام» گفت") == "«سلام» گفت"
    assert strip_arrow_artifact("« הקודם") == ""
