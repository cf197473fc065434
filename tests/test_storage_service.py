"""Tests for index provisioning and document storage."""

import pytest

from conftest import FakeEmbedder, FakeEngine, make_hit
from docsearch.core.errors import DocumentNotFoundError, IndexNotFoundError, ValidationError
from docsearch.core.models.document import StoredDocumentPartsInfo
from docsearch.core.models.index import CreateIndexParams, IndexInfo, KnnIndexParams
from docsearch.core.services.paginator_service import PaginatorService
from docsearch.core.services.storage_service import StorageService


class FakeStorage:
    """In-memory index and document storage."""

    def __init__(self, indexes=("docs",)):
        self.indexes = {name: IndexInfo(name=name) for name in indexes}
        self.stored = {}
        self.deleted = []
        self.pipelines = []

    def create_index(self, params):
        self.indexes[params.id] = IndexInfo(name=params.id)
        return params.id

    def delete_index(self, index_id):
        self.indexes.pop(index_id)

    def get_index(self, index_id):
        if index_id not in self.indexes:
            raise IndexNotFoundError(f"there is no index with name {index_id}")
        return self.indexes[index_id]

    def get_all_indexes(self):
        return list(self.indexes.values())

    def init_pipelines(self, params):
        self.pipelines.append(params)

    def store_document_parts(self, index_id, parts):
        self.stored.setdefault(index_id, []).extend(parts)
        return StoredDocumentPartsInfo(
            large_doc_id=parts[0].large_doc_id,
            first_part_id=f"{index_id}-0",
            doc_parts_amount=len(parts),
        )

    def get_document_part(self, index_id, doc_part_id):
        for part in self.stored.get(index_id, []):
            if f"{part.large_doc_id}-{part.doc_part_id}" == doc_part_id:
                return part
        raise DocumentNotFoundError(f"document [{doc_part_id}] not found in index [{index_id}]")

    def delete_document_parts(self, index_id, large_doc_id):
        self.deleted.append((index_id, large_doc_id))


@pytest.fixture
def storage():
    return FakeStorage()


def make_service(storage, engine=None, embedder=None, **kwargs):
    engine = engine or FakeEngine()
    return StorageService(
        indexes=storage,
        documents=storage,
        engine=engine,
        paginator=PaginatorService(engine),
        embedder=embedder,
        **kwargs,
    )


class TestIndexes:
    """Tests for index operations."""

    def test_create_and_list(self, storage):
        service = make_service(storage)

        assert service.create_index(CreateIndexParams(id="photos")) == "photos"
        assert {i.name for i in service.get_all_indexes()} == {"docs", "photos"}

    @pytest.mark.parametrize("name", ["", "Docs", ".hidden", "_system"])
    def test_invalid_index_name(self, storage, name):
        with pytest.raises(ValidationError):
            make_service(storage).create_index(CreateIndexParams(id=name))

    def test_invalid_overlap(self, storage):
        params = CreateIndexParams(id="docs2", knn=KnnIndexParams(overlap_rate=1.0))

        with pytest.raises(ValidationError):
            make_service(storage).create_index(params)

    def test_init_pipelines_defaults(self, storage):
        make_service(storage).init_pipelines()

        assert storage.pipelines == [KnnIndexParams()]


class TestStoreDocument:
    """Tests for storing documents."""

    def test_store_divides(self, storage, large_document):
        service = make_service(storage, max_content_size=100, overlap_rate=0.2)

        info = service.store_document("docs", large_document)

        assert info.doc_parts_amount == 13
        assert info.large_doc_id == large_document.large_doc_id
        assert all(p.embeddings is None for p in storage.stored["docs"])

    def test_store_embeds_parts(self, storage, large_document):
        embedder = FakeEmbedder([0.5, 0.5])
        service = make_service(storage, embedder=embedder, max_content_size=500, overlap_rate=0.0)

        service.store_document("docs", large_document)

        parts = storage.stored["docs"]
        assert len(embedder.passage_calls) == len(parts) == 3
        assert embedder.passage_calls[0] == parts[0].content
        assert embedder.calls == []
        assert parts[0].chunked_text == [parts[0].content]
        assert parts[0].embeddings[0].knn == [0.5, 0.5]

    def test_missing_index(self, storage, large_document):
        with pytest.raises(IndexNotFoundError):
            make_service(storage).store_document("missing", large_document)

        assert storage.stored == {}

    def test_store_rejects_wide_overlap(self, storage, large_document):
        service = make_service(storage, max_content_size=100, overlap_rate=0.6)

        with pytest.raises(ValidationError):
            service.store_document("docs", large_document)

        assert storage.stored == {}

    def test_get_document_part(self, storage, large_document):
        service = make_service(storage, max_content_size=500, overlap_rate=0.0)
        service.store_document("docs", large_document)

        part = service.get_document_part("docs", f"{large_document.large_doc_id}-1")

        assert part.doc_part_id == 1

    def test_get_missing_document_part(self, storage):
        with pytest.raises(DocumentNotFoundError):
            make_service(storage).get_document_part("docs", "missing")

    def test_get_document_part_requires_id(self, storage):
        with pytest.raises(ValidationError):
            make_service(storage).get_document_part("docs", "")

    def test_delete_document(self, storage):
        make_service(storage).delete_document("docs", "L")

        assert storage.deleted == [("docs", "L")]


class TestGetDocumentParts:
    """Tests for reading all parts of a document."""

    def test_walks_all_pages(self, storage):
        engine = FakeEngine(
            responses=[{"_scroll_id": "S1", "hits": {"hits": [make_hit("p2", doc_part_id=2)]}}],
            scroll_responses=[
                {"_scroll_id": "S2", "hits": {"hits": [make_hit("p0", doc_part_id=0), make_hit("p1", doc_part_id=1)]}},
                {"hits": {"hits": []}},
            ],
        )
        service = make_service(storage, engine=engine, scroll_lifetime="2m")

        parts = service.get_document_parts("docs", "large-1")

        assert [p.doc_part_id for p in parts] == [0, 1, 2]
        search = engine.searches[0]
        assert search["scroll"] == "2m"
        assert search["query"]["query"]["bool"]["filter"] == [{"term": {"large_doc_id": "large-1"}}]
        assert search["query"]["sort"] == [{"created_at": {"order": "asc"}}]
        assert engine.scrolls == [("S1", "2m"), ("S2", "2m")]


class TestIngestPath:
    """Tests for ingesting a folder."""

    def test_ingest_text_files(self, storage, tmp_path):
        (tmp_path / "a.txt").write_text("first document", encoding="utf-8")
        (tmp_path / "b.md").write_text("# second", encoding="utf-8")
        (tmp_path / "empty.txt").write_text("   ", encoding="utf-8")
        (tmp_path / "image.png").write_bytes(b"\x89PNG")

        count = make_service(storage).ingest_path("docs", tmp_path)

        assert count == 2
        stored = storage.stored["docs"]
        assert [p.file_name for p in stored] == ["a.txt", "b.md"]
        assert stored[0].file_size == len("first document")
        assert stored[0].content == "first document"

    def test_missing_folder(self, storage, tmp_path):
        with pytest.raises(ValidationError):
            make_service(storage).ingest_path("docs", tmp_path / "missing")
