import json

import pytest

from core.classifier import PageClassifier
from utils.evaluation import compute_metrics, format_confusion_matrix, load_manifest, predict

from conftest import EMPTY_PAGE, content_page, index_page


def write_manifest(tmp_path, entries):
    path = tmp_path / "manifest.json"
    path.write_text(json.dumps(entries, ensure_ascii=False), encoding='utf-8')
    return str(path)


def test_compute_metrics():
    y_true = ['content', 'content', 'index', 'empty']
    y_pred = ['content', 'index', 'index', 'empty']

    metrics = compute_metrics(y_true, y_pred)

    assert metrics['accuracy'] == pytest.approx(0.75)
    assert metrics['labels'] == ['content', 'index', 'empty']
    assert metrics['confusion_matrix'] == [[1, 1, 0], [0, 1, 0], [0, 0, 1]]
    assert metrics['per_label']['content']['recall'] == pytest.approx(0.5)
    assert metrics['per_label']['index']['precision'] == pytest.approx(0.5)
    assert "content" in format_confusion_matrix(metrics)


def test_load_manifest_resolves_paths(tmp_path):
    manifest = write_manifest(tmp_path, [{"file": "a.html", "url": "https://lib.test/a", "label": "Content"}])
    samples = load_manifest(manifest)
    assert samples[0].path == str(tmp_path / "a.html")
    assert samples[0].label == 'content'


def test_load_manifest_rejects_unknown_label(tmp_path):
    manifest = write_manifest(tmp_path, [{"file": "a.html", "url": "https://lib.test/a", "label": "toc"}])
    with pytest.raises(ValueError):
        load_manifest(manifest)


def test_load_manifest_rejects_missing_fields(tmp_path):
    manifest = write_manifest(tmp_path, [{"file": "a.html"}])
    with pytest.raises(ValueError):
        load_manifest(manifest)


def test_predict_on_labelled_pages(tmp_path):
    pages = {
        "content.html": (content_page("פרק א"), 'content'),
        "index.html": (index_page("ספר", [("/p1", "פרק א"), ("/p2", "פרק ב")]), 'index'),
        "empty.html": (EMPTY_PAGE, 'empty'),
    }
    entries = []
    for name, (html, label) in pages.items():
        (tmp_path / name).write_bytes(html.encode('cp1255'))
        entries.append({"file": name, "url": f"https://lib.test/{name}", "label": label})

    samples = load_manifest(write_manifest(tmp_path, entries))
    predictions = predict(PageClassifier(), samples)

    assert predictions == ['content', 'index', 'empty']
    assert compute_metrics([s.label for s in samples], predictions)['accuracy'] == 1.0
