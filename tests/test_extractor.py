"""Tests for search response extraction."""

import logging

import pytest

from conftest import make_hit
from docsearch.core.errors import SerdeError
from docsearch.core.query.extractor import extract


class TestExtract:
    """Tests for extract."""

    def test_page_with_cursor(self, search_response):
        page = extract(search_response)

        assert page.cursor == "S"
        assert not page.exhausted
        assert len(page.founded) == 1

        founded = page.founded[0]
        assert founded.id == "part-1"
        assert founded.index == "docs"
        assert founded.score == 1.5
        assert founded.document.large_doc_id == "large-1"
        assert founded.document.file_path == "/data/notes.txt"
        assert founded.document.content == "hello world"

    def test_null_cursor(self, raw_hit):
        page = extract({"_scroll_id": None, "hits": {"hits": [raw_hit]}})

        assert page.cursor is None
        assert page.exhausted
        assert len(page.founded) == 1

    def test_missing_cursor(self, raw_hit):
        assert extract({"hits": {"hits": [raw_hit]}}).cursor is None

    def test_malformed_hits_dropped_in_order(self, caplog):
        broken = make_hit("broken")
        del broken["_source"]["file_path"]
        raw = {
            "_scroll_id": "S",
            "hits": {"hits": [make_hit("a"), broken, {"_id": "x"}, make_hit("b")]},
        }

        with caplog.at_level(logging.WARNING):
            page = extract(raw)

        assert [f.id for f in page.founded] == ["a", "b"]
        assert "Dropped 2/4 malformed hits" in caplog.text

    def test_missing_hits_keeps_cursor(self):
        page = extract({"_scroll_id": "S"})

        assert page.founded == []
        assert page.cursor == "S"

    def test_zero_hits_keeps_cursor(self):
        page = extract({"_scroll_id": "S", "hits": {"hits": []}})

        assert page.founded == []
        assert page.cursor == "S"
        assert not page.exhausted

    def test_absent_highlight_is_empty(self):
        founded = extract({"hits": {"hits": [make_hit()]}}).founded[0]

        assert founded.highlight == []

    @pytest.mark.parametrize("raw", [[], "text", None, 42])
    def test_not_an_object(self, raw):
        with pytest.raises(SerdeError):
            extract(raw)

    def test_highlights_content_first(self):
        hit = make_hit(highlight={"file_name": ["<b>notes</b>"], "content": ["<b>hello</b> world"]})

        founded = extract({"hits": {"hits": [hit]}}).founded[0]

        assert founded.highlight == ["<b>hello</b> world", "<b>notes</b>"]

    def test_metadata_parsed(self):
        hit = make_hit()
        hit["_source"]["metadata"] = {
            "source": "camera",
            "locations": [{"name": "Kyiv", "coords": [30.5, 50.4]}],
            "classes": [{"name": "car", "probability": 0.9}],
            "subjects": [{"name": "traffic"}],
        }

        metadata = extract({"hits": {"hits": [hit]}}).founded[0].document.metadata

        assert metadata.source == "camera"
        assert metadata.locations[0].longitude == 30.5
        assert metadata.locations[0].latitude == 50.4
        assert metadata.classes[0].name == "car"
        assert metadata.subjects == ["traffic"]

    def test_broken_metadata_keeps_hit(self):
        hit = make_hit()
        hit["_source"]["metadata"] = {"classes": [{"name": "car"}]}

        page = extract({"hits": {"hits": [hit]}})

        assert len(page.founded) == 1
        assert page.founded[0].document.metadata is None

    def test_embeddings_parsed(self):
        hit = make_hit()
        hit["_source"]["embeddings"] = [{"knn": [0.1, 0.2]}]

        document = extract({"hits": {"hits": [hit]}}).founded[0].document

        assert document.embeddings[0].knn == [0.1, 0.2]
