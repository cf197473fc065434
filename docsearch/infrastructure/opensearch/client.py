import hashlib
import json
import logging
from typing import Any, Optional

import requests
from pydantic import ValidationError as PydanticValidationError

from docsearch.core.errors import (
    IndexNotFoundError,
    InternalError,
    SerdeError,
    ServiceError,
    ValidationError,
)
from docsearch.core.models.document import DocumentPart, StoredDocumentPartsInfo
from docsearch.core.models.index import CreateIndexParams, IndexInfo, KnnIndexParams
from docsearch.core.query.dto import FoundedDocumentInfo, SourceDocument

from . import errors, schema

logger = logging.getLogger(__name__)

ALL_INDEXES = "*"


def gen_document_part_id(index_id: str, part: DocumentPart) -> str:
    """Stable id of a stored part, so re-ingesting overwrites it."""
    common_path = f"{index_id}/{part.file_path}/{part.doc_part_id}"
    return hashlib.md5(common_path.encode()).hexdigest()


class OpenSearchClient:
    """Search engine client using OpenSearch HTTP API."""

    def __init__(
        self,
        address: str = "https://localhost:9200",
        username: str = "admin",
        password: str = "admin",
        verify_certs: bool = False,
        timeout: float = 60.0,
        model_id: str = "",
        session: Optional[requests.Session] = None,
    ):
        """Initialize OpenSearch client.

        Args:
            address: Cluster URL.
            username: Basic auth user.
            password: Basic auth password.
            verify_certs: Verify TLS certificates.
            timeout: Request timeout in seconds.
            model_id: Deployed embedding model for the ingest pipeline.
            session: Preconfigured HTTP session.
        """
        self._base_url = address.rstrip("/")
        self._timeout = timeout
        self._model_id = model_id
        self._owns_session = session is None
        self._session = session or requests.Session()
        self._session.auth = (username, password)
        self._session.verify = verify_certs

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        body: Optional[Any] = None,
        data: Optional[str] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> Any:
        url = f"{self._base_url}{path}"
        logger.debug(f"{method} {url} params={params}")
        try:
            resp = self._session.request(
                method,
                url,
                params=params,
                json=body,
                data=data,
                headers=headers,
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            raise errors.from_transport(e) from e

        if not resp.ok:
            raise errors.from_response(resp)

        if not resp.content:
            return None

        try:
            return resp.json()
        except ValueError as e:
            raise SerdeError(f"failed to decode response of {method} {path}: {e}") from e

    @staticmethod
    def _search_path(indexes: list[str]) -> str:
        if not indexes or indexes[0] == ALL_INDEXES:
            return "/_search"
        return f"/{','.join(indexes)}/_search"

    def search(
        self,
        indexes: list[str],
        query: dict[str, Any],
        scroll: Optional[str] = None,
    ) -> dict[str, Any]:
        params = {"scroll": scroll} if scroll else None
        return self._request("POST", self._search_path(indexes), params=params, body=query)

    def scroll(self, cursor: str, lifetime: str) -> dict[str, Any]:
        return self._request(
            "POST",
            "/_search/scroll",
            body={"scroll": lifetime, "scroll_id": cursor},
        )

    def clear_scroll(self, cursor: str) -> None:
        self._request("DELETE", "/_search/scroll", body={"scroll_id": [cursor]})

    def create_index(self, params: CreateIndexParams) -> str:
        pipeline = schema.INGEST_PIPELINE_NAME if self._model_id else None
        mappings = schema.build_index_mappings(params, pipeline=pipeline)
        self._request("PUT", f"/{params.id}", body=mappings)
        logger.info(f"Created index: {params.id}")
        return params.id

    def delete_index(self, index_id: str) -> None:
        self._request("DELETE", f"/{index_id}")
        logger.info(f"Deleted index: {index_id}")

    def get_index(self, index_id: str) -> IndexInfo:
        data = self._request("GET", f"/_cat/indices/{index_id}", params={"format": "json"})
        indexes = self._parse_indexes(data)
        if not indexes:
            raise IndexNotFoundError(f"there is no index with name {index_id}")
        return indexes[0]

    def get_all_indexes(self) -> list[IndexInfo]:
        data = self._request("GET", "/_cat/indices", params={"format": "json"})
        return [i for i in self._parse_indexes(data) if not i.name.startswith(".")]

    def init_pipelines(self, params: KnnIndexParams) -> None:
        if not self._model_id:
            raise ValidationError("embedding model id is required to init ingest pipeline")

        pipeline = schema.build_ingest_pipeline(self._model_id, params)
        self._request("PUT", f"/_ingest/pipeline/{schema.INGEST_PIPELINE_NAME}", body=pipeline)
        logger.info(f"Initialized ingest pipeline: {schema.INGEST_PIPELINE_NAME}")

    def store_document_parts(
        self, index_id: str, parts: list[DocumentPart]
    ) -> StoredDocumentPartsInfo:
        if not parts:
            raise InternalError("missing document parts to store")

        stored_ids = []
        lines = []
        for part in parts:
            part_id = gen_document_part_id(index_id, part)
            lines.append(json.dumps({"index": {"_id": part_id}}))
            lines.append(json.dumps(SourceDocument.from_domain(part).to_body()))
            stored_ids.append(part_id)

        resp = self._request(
            "POST",
            f"/{index_id}/_bulk",
            data="\n".join(lines) + "\n",
            headers={"Content-Type": "application/x-ndjson"},
        )
        if isinstance(resp, dict) and resp.get("errors"):
            reason = self._first_bulk_error(resp)
            raise ServiceError(f"failed to store document parts: {reason}")

        logger.info(f"Stored {len(parts)} parts of {parts[0].file_name} in {index_id}")
        return StoredDocumentPartsInfo(
            large_doc_id=parts[0].large_doc_id,
            first_part_id=stored_ids[0],
            doc_parts_amount=len(parts),
        )

    def get_document_part(self, index_id: str, doc_part_id: str) -> DocumentPart:
        """Missing parts come back as 404 with ``found: false``."""
        data = self._request("GET", f"/{index_id}/_doc/{doc_part_id}")
        try:
            info = FoundedDocumentInfo.model_validate(data)
        except PydanticValidationError as e:
            raise SerdeError(f"failed to parse document part {doc_part_id}: {e}") from e
        return info.source.to_domain()

    def delete_document_parts(self, index_id: str, large_doc_id: str) -> None:
        self._request(
            "POST",
            f"/{index_id}/_delete_by_query",
            body={"query": {"term": {"large_doc_id": large_doc_id}}},
        )

    @staticmethod
    def _parse_indexes(data: Any) -> list[IndexInfo]:
        if not isinstance(data, list):
            raise SerdeError("expected list of indexes in response")

        indexes = []
        for item in data:
            if not isinstance(item, dict) or "index" not in item:
                continue
            indexes.append(
                IndexInfo(
                    name=item["index"],
                    health=item.get("health"),
                    status=item.get("status"),
                    docs_count=int(item.get("docs.count") or 0),
                    store_size=item.get("store.size"),
                )
            )
        return indexes

    @staticmethod
    def _first_bulk_error(resp: dict) -> str:
        for item in resp.get("items", []):
            for action in item.values():
                error = action.get("error") if isinstance(action, dict) else None
                if error:
                    return error.get("reason", str(error)) if isinstance(error, dict) else str(error)
        return "unknown bulk error"
