"""Query composer - translates search parameters into engine queries."""

from typing import Any, Optional, assert_never

from ..models.searching import (
    FilterParams,
    FullTextParams,
    HybridParams,
    ResultOrder,
    ResultParams,
    RetrieveParams,
    SearchingParams,
    SemanticParams,
)

EngineQuery = dict[str, Any]

EMBEDDINGS_PATH = "embeddings"
EMBEDDINGS_FIELD = "embeddings.knn"
HIGHLIGHT_FIELD = "content"
SORT_FIELD = "created_at"
LOCATIONS_PATH = "metadata.locations"
CLASSES_PATH = "metadata.classes"
DEFAULT_GEO_DISTANCE = "5km"
FIRST_DOCUMENT_PART_ID = 0


def compose(params: SearchingParams) -> EngineQuery:
    """Build engine query for the given search parameters.

    Filters always land in the non-scoring ``bool.filter`` clause.

    Args:
        params: Search parameters.

    Returns:
        Engine query document.
    """
    kind = params.kind
    filters = build_filter_clauses(params.filter)

    if isinstance(kind, RetrieveParams):
        query = _compose_retrieve(kind, params.result, filters)
    elif isinstance(kind, FullTextParams):
        query = _compose_fulltext(kind, params.result, filters)
    elif isinstance(kind, SemanticParams):
        query = _compose_semantic(kind, filters)
    elif isinstance(kind, HybridParams):
        query = _compose_hybrid(kind, params.result, filters)
    else:
        assert_never(kind)

    query["size"] = params.result.size
    query["_source"] = {"exclude": params.result.excluded}
    if params.result.offset > 0:
        query["from"] = params.result.offset
    if params.result.min_score is not None:
        query["min_score"] = params.result.min_score

    return query


def _compose_retrieve(
    kind: RetrieveParams, result: ResultParams, filters: list[dict]
) -> EngineQuery:
    exact = []
    if kind.path is not None:
        exact.append({"term": {"file_path": kind.path}})
    if kind.large_doc_id is not None:
        exact.append({"term": {"large_doc_id": kind.large_doc_id}})
    if kind.doc_part_id is not None:
        exact.append({"term": {"doc_part_id": kind.doc_part_id}})
    elif kind.large_doc_id is None:
        # one hit per stored document
        exact.append({"term": {"doc_part_id": FIRST_DOCUMENT_PART_ID}})

    return {
        "query": {"bool": {"filter": exact + filters}},
        "sort": build_sort(result.order),
    }


def _compose_fulltext(
    kind: FullTextParams, result: ResultParams, filters: list[dict]
) -> EngineQuery:
    if kind.query is None:
        must = [{"match_all": {}}]
    else:
        must = [build_multi_match(kind.query, kind.fields, kind.operator.value)]

    return {
        "query": {"bool": {"must": must, "filter": filters}},
        "highlight": build_highlight(result),
        "sort": build_sort(result.order),
    }


def _compose_semantic(kind: SemanticParams, filters: list[dict]) -> EngineQuery:
    knn = build_knn(kind.vector or [], kind.knn_amount, kind.ef_search)
    return {
        "query": {"bool": {"must": [knn], "filter": filters}},
    }


def _compose_hybrid(
    kind: HybridParams, result: ResultParams, filters: list[dict]
) -> EngineQuery:
    lexical = build_multi_match(kind.query, kind.fields, kind.operator.value)
    knn = build_knn(kind.vector or [], kind.knn_amount, kind.ef_search)
    return {
        "query": {
            "bool": {
                "should": [lexical, knn],
                "minimum_should_match": 1,
                "filter": filters,
            }
        },
        "highlight": build_highlight(result),
    }


def build_multi_match(query: str, fields: list[str], operator: str) -> dict:
    return {
        "multi_match": {
            "query": query,
            "fields": list(fields),
            "operator": operator,
        }
    }


def build_knn(vector: list[float], knn_amount: int, ef_search: Optional[int]) -> dict:
    """Nested nearest-neighbor clause over the embeddings field."""
    knn_query: dict[str, Any] = {"vector": list(vector), "k": knn_amount}
    if ef_search is not None:
        knn_query["method_parameters"] = {"ef_search": ef_search}

    return {
        "nested": {
            "path": EMBEDDINGS_PATH,
            "score_mode": "max",
            "query": {"knn": {EMBEDDINGS_FIELD: knn_query}},
        }
    }


def build_highlight(result: ResultParams) -> dict:
    field_params: dict[str, Any] = {
        "pre_tags": [result.highlight_pre_tag],
        "post_tags": [result.highlight_post_tag],
    }
    if result.highlight_item_size is not None:
        field_params["fragment_size"] = result.highlight_item_size
    if result.highlight_items is not None:
        field_params["number_of_fragments"] = result.highlight_items

    return {"fields": {HIGHLIGHT_FIELD: field_params}}


def build_sort(order: ResultOrder) -> list[dict]:
    return [{SORT_FIELD: {"order": order.value}}]


def build_filter_clauses(params: Optional[FilterParams]) -> list[dict]:
    """Translate filter parameters into non-scoring clauses."""
    if params is None:
        return []

    clauses = []
    for field_name, lower, upper in (
        ("created_at", params.created_from, params.created_to),
        ("modified_at", params.modified_from, params.modified_to),
        ("file_size", params.size_from, params.size_to),
    ):
        bounds = {}
        if lower is not None:
            bounds["gte"] = lower
        if upper is not None:
            bounds["lte"] = upper
        if bounds:
            clauses.append({"range": {field_name: bounds}})

    if params.location_coords is not None:
        clauses.append({
            "nested": {
                "path": LOCATIONS_PATH,
                "query": {
                    "geo_distance": {
                        "distance": params.distance or DEFAULT_GEO_DISTANCE,
                        f"{LOCATIONS_PATH}.coords": list(params.location_coords),
                    }
                },
            }
        })

    if params.source is not None:
        clauses.append({"term": {"metadata.source": params.source}})

    if params.semantic_source is not None:
        clauses.append({"term": {"metadata.semantic_source": params.semantic_source}})

    if params.pipeline_label is not None:
        clauses.append({"term": {"metadata.pipelines": params.pipeline_label}})

    class_clauses = []
    if params.class_label is not None:
        class_clauses.append({"term": {f"{CLASSES_PATH}.name": params.class_label}})
    if params.class_probability is not None:
        class_clauses.append(
            {"range": {f"{CLASSES_PATH}.probability": {"gte": params.class_probability}}}
        )
    if class_clauses:
        clauses.append({
            "nested": {
                "path": CLASSES_PATH,
                "query": {"bool": {"filter": class_clauses}},
            }
        })

    return clauses
