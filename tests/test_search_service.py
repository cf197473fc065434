"""Tests for the search orchestrator."""

import pytest

from conftest import FakeEmbedder, FakeEngine, make_hit
from docsearch.core.errors import ServiceUnavailableError, ValidationError
from docsearch.core.models.searching import (
    FilterParams,
    FullTextParams,
    HybridParams,
    ResultParams,
    RetrieveParams,
    SearchingParams,
    SemanticParams,
)
from docsearch.core.services.paginator_service import PaginatorService
from docsearch.core.services.search_service import SearchService


@pytest.fixture
def service(engine, paginator, embedder):
    return SearchService(engine, paginator, embedder=embedder, scroll_lifetime="5m", knn_ef_search=100)


def searching(kind, indexes=None, **result):
    return SearchingParams(indexes=indexes or ["docs"], kind=kind, result=ResultParams(**result))


class TestSearch:
    """Tests for search dispatch."""

    def test_fulltext_opens_scroll(self, engine, service, search_response):
        engine.responses = [search_response]

        page = service.fulltext(searching(FullTextParams(query="hello")))

        assert engine.searches[0]["indexes"] == ["docs"]
        assert engine.searches[0]["scroll"] == "5m"
        assert page.cursor == "S"
        assert page.founded[0].id == "part-1"

    def test_retrieve(self, engine, service):
        service.retrieve(searching(RetrieveParams(path="/data/notes.txt")))

        query = engine.searches[0]["query"]
        assert {"term": {"file_path": "/data/notes.txt"}} in query["query"]["bool"]["filter"]

    def test_offset_disables_scroll(self, engine, service):
        service.fulltext(searching(FullTextParams(query="q"), offset=10))

        assert engine.searches[0]["scroll"] is None
        assert engine.searches[0]["query"]["from"] == 10

    def test_hybrid_without_scroll(self, engine, service):
        service.hybrid(searching(HybridParams(query="q")))

        assert engine.searches[0]["scroll"] is None

    def test_kind_mismatch(self, service):
        with pytest.raises(ValidationError):
            service.semantic(searching(FullTextParams(query="q")))

    def test_engine_error_propagates(self, paginator):
        class DownEngine(FakeEngine):
            def search(self, indexes, query, scroll=None):
                raise ServiceUnavailableError()

        service = SearchService(DownEngine(), paginator)

        with pytest.raises(ServiceUnavailableError):
            service.fulltext(searching(FullTextParams(query="q")))


class TestVectorResolution:
    """Tests for query embedding."""

    def test_query_embedded(self, engine, embedder, service):
        service.semantic(searching(SemanticParams(query="cats", knn_amount=7)))

        assert embedder.calls == ["cats"]
        knn = engine.searches[0]["query"]["query"]["bool"]["must"][0]["nested"]["query"]["knn"]
        assert knn["embeddings.knn"] == {
            "vector": [0.1, 0.2, 0.3],
            "k": 7,
            "method_parameters": {"ef_search": 100},
        }

    def test_precomputed_vector_skips_embedder(self, engine, embedder, service):
        service.semantic(searching(SemanticParams(vector=[1.0, 2.0], ef_search=16)))

        assert embedder.calls == []
        knn = engine.searches[0]["query"]["query"]["bool"]["must"][0]["nested"]["query"]["knn"]
        assert knn["embeddings.knn"]["vector"] == [1.0, 2.0]
        assert knn["embeddings.knn"]["method_parameters"] == {"ef_search": 16}

    def test_hybrid_query_embedded(self, engine, service):
        params = SearchingParams(
            indexes=["docs"],
            kind=HybridParams(query="q"),
            filter=FilterParams(source="camera"),
        )

        service.hybrid(params)

        bool_query = engine.searches[0]["query"]["query"]["bool"]
        assert bool_query["should"][0]["multi_match"]["query"] == "q"
        assert bool_query["should"][1]["nested"]["query"]["knn"]["embeddings.knn"]["vector"] == [0.1, 0.2, 0.3]
        assert bool_query["filter"] == [{"term": {"metadata.source": "camera"}}]

    def test_params_not_mutated(self, service):
        kind = SemanticParams(query="cats")

        service.semantic(searching(kind))

        assert kind.vector is None
        assert kind.ef_search is None

    def test_without_embedder(self, engine, paginator):
        service = SearchService(engine, paginator)

        with pytest.raises(ValidationError):
            service.semantic(searching(SemanticParams(query="cats")))


class TestValidation:
    """Tests for request validation."""

    @pytest.mark.parametrize(
        "params",
        [
            SearchingParams(indexes=[], kind=FullTextParams(query="q")),
            SearchingParams(indexes=[""], kind=FullTextParams(query="q")),
            SearchingParams(indexes=["docs"], kind=FullTextParams(query="q"), result=ResultParams(size=0)),
            SearchingParams(indexes=["docs"], kind=FullTextParams(query="q"), result=ResultParams(offset=-1)),
            SearchingParams(indexes=["docs"], kind=SemanticParams()),
            SearchingParams(indexes=["docs"], kind=SemanticParams(query="q", knn_amount=0)),
        ],
    )
    def test_rejected(self, engine, service, params):
        with pytest.raises(ValidationError):
            service.search(params)

        assert engine.searches == []


class TestPagination:
    """Tests for pagination delegation."""

    def test_paginate_and_delete(self):
        engine = FakeEngine(scroll_responses=[{"_scroll_id": "S2", "hits": {"hits": [make_hit("b")]}}])
        service = SearchService(engine, PaginatorService(engine), embedder=FakeEmbedder())

        page = service.paginate("S1", "1m")
        service.delete_session(page.cursor)

        assert engine.scrolls == [("S1", "1m")]
        assert engine.cleared == ["S2"]
