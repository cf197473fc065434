"""
Test configuration and fixtures.
"""

import pytest

from docsearch.core.models.document import LargeDocument
from docsearch.core.services.paginator_service import PaginatorService


class FakeEngine:
    """In-memory search engine returning canned responses."""

    def __init__(self, responses=None, scroll_responses=None):
        self.responses = list(responses or [])
        self.scroll_responses = list(scroll_responses or [])
        self.searches = []
        self.scrolls = []
        self.cleared = []

    def search(self, indexes, query, scroll=None):
        self.searches.append({"indexes": indexes, "query": query, "scroll": scroll})
        return self.responses.pop(0) if self.responses else {"hits": {"hits": []}}

    def scroll(self, cursor, lifetime):
        self.scrolls.append((cursor, lifetime))
        return self.scroll_responses.pop(0) if self.scroll_responses else {"hits": {"hits": []}}

    def clear_scroll(self, cursor):
        self.cleared.append(cursor)


class FakeEmbedder:
    """Embedder returning a fixed vector."""

    def __init__(self, vector=None):
        self.vector = vector or [0.1, 0.2, 0.3]
        self.calls = []
        self.passage_calls = []

    def embed(self, text):
        self.calls.append(text)
        return list(self.vector)

    def embed_passage(self, text):
        self.passage_calls.append(text)
        return list(self.vector)


def make_hit(doc_id="part-1", index="docs", doc_part_id=0, content="hello world", **extra):
    """Raw engine hit with a valid source."""
    hit = {
        "_id": doc_id,
        "_index": index,
        "_score": 1.5,
        "_source": {
            "large_doc_id": "large-1",
            "doc_part_id": doc_part_id,
            "file_name": "notes.txt",
            "file_path": "/data/notes.txt",
            "file_size": 11,
            "created_at": 1700000000,
            "modified_at": 1700000100,
            "content": content,
        },
    }
    hit.update(extra)
    return hit


@pytest.fixture
def large_document():
    """Large document with deterministic content."""
    content = "".join(chr(ord("a") + i % 26) for i in range(1024))
    return LargeDocument(
        file_name="alphabet.txt",
        file_path="/data/alphabet.txt",
        file_size=len(content),
        created_at=1700000000,
        modified_at=1700000100,
        content=content,
    )


@pytest.fixture
def raw_hit():
    return make_hit()


@pytest.fixture
def search_response(raw_hit):
    """Search response opening a scroll session."""
    return {"_scroll_id": "S", "hits": {"hits": [raw_hit]}}


@pytest.fixture
def engine():
    return FakeEngine()


@pytest.fixture
def embedder():
    return FakeEmbedder()


@pytest.fixture
def paginator(engine):
    return PaginatorService(engine, lifetime="1m")
