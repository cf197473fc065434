"""Index mappings and ingest pipeline definitions."""

from typing import Any, Optional

from docsearch.core.models.index import CreateIndexParams, KnnIndexParams

INGEST_PIPELINE_NAME = "embeddings-ingest-pipeline"
TOKENIZER_KIND = "standard"


def build_ingest_pipeline(model_id: str, params: KnnIndexParams) -> dict[str, Any]:
    """Chunk content by tokens and embed every chunk on ingest."""
    return {
        "description": "A text chunking and embedding ingest pipeline",
        "processors": [
            {
                "text_chunking": {
                    "algorithm": {
                        "fixed_token_length": {
                            "token_limit": params.token_limit,
                            "overlap_rate": params.overlap_rate,
                            "tokenizer": TOKENIZER_KIND,
                        }
                    },
                    "field_map": {"content": "chunked_text"},
                }
            },
            {
                "text_embedding": {
                    "model_id": model_id,
                    "field_map": {"chunked_text": "embeddings"},
                }
            },
        ],
    }


def build_index_mappings(
    params: CreateIndexParams, pipeline: Optional[str] = None
) -> dict[str, Any]:
    knn = params.knn or KnnIndexParams()

    index_settings: dict[str, Any] = {
        "knn": True,
        "knn.algo_param.ef_search": knn.knn_ef_search,
        "number_of_shards": params.number_of_shards,
        "number_of_replicas": params.number_of_replicas,
    }
    if pipeline:
        index_settings["default_pipeline"] = pipeline

    named_nested = {
        "type": "nested",
        "properties": {"name": {"type": "keyword"}},
    }

    return {
        "settings": {"index": index_settings},
        "mappings": {
            "properties": {
                "large_doc_id": {"type": "keyword"},
                "doc_part_id": {"type": "long"},
                "file_name": {
                    "type": "text",
                    "fields": {"keyword": {"type": "keyword", "ignore_above": 256}},
                },
                "file_path": {"type": "keyword"},
                "file_size": {"type": "long"},
                "content": {"type": "text"},
                "chunked_text": {"type": "text"},
                "created_at": {"type": "date", "format": "epoch_second"},
                "modified_at": {"type": "date", "format": "epoch_second"},
                "embeddings": {
                    "type": "nested",
                    "properties": {
                        "knn": {
                            "type": "knn_vector",
                            "dimension": knn.knn_dimension,
                            "method": {"name": "hnsw", "engine": "lucene"},
                        }
                    },
                },
                "metadata": {
                    "type": "object",
                    "properties": {
                        "photo": {"type": "keyword"},
                        "pipeline_id": {"type": "long"},
                        "source": {"type": "keyword"},
                        "semantic_source": {"type": "keyword"},
                        "summary": {"type": "text"},
                        "pipelines": {"type": "keyword"},
                        "references": {"type": "keyword"},
                        "locations": {
                            "type": "nested",
                            "properties": {
                                "name": {"type": "keyword"},
                                "coords": {"type": "geo_point"},
                            },
                        },
                        "classes": {
                            "type": "nested",
                            "properties": {
                                "name": {"type": "keyword"},
                                "probability": {"type": "float"},
                            },
                        },
                        "subjects": named_nested,
                        "icons": named_nested,
                        "groups": named_nested,
                    },
                },
            }
        },
    }
