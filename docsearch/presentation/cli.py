import argparse
import json
import logging
import sys
from dataclasses import asdict
from typing import Any

from docsearch.config.settings import settings
from docsearch.container import configure_container, container
from docsearch.core.errors import DocSearchError
from docsearch.core.models.index import CreateIndexParams, KnnIndexParams
from docsearch.core.models.searching import (
    FilterParams,
    FullTextParams,
    HybridParams,
    MatchOperator,
    ResultOrder,
    ResultParams,
    RetrieveParams,
    ScrollCursor,
    SearchingParams,
    SemanticParams,
)
from docsearch.core.services.search_service import SearchService
from docsearch.core.services.storage_service import StorageService

logger = logging.getLogger(__name__)


def _print_json(data: Any) -> None:
    print(json.dumps(data, ensure_ascii=False, indent=2, default=str))


def _knn_params() -> KnnIndexParams:
    return KnnIndexParams(
        knn_dimension=settings.knn_dimension,
        token_limit=settings.token_limit,
        overlap_rate=settings.overlap_rate,
        knn_ef_search=settings.knn_ef_search,
    )


def _result_params(args: argparse.Namespace) -> ResultParams:
    return ResultParams(
        size=args.size,
        offset=args.offset,
        min_score=args.min_score,
        order=ResultOrder(args.order),
        highlight_pre_tag=args.pre_tag,
        highlight_post_tag=args.post_tag,
    )


def _coords(value: str) -> list[float]:
    try:
        lon, lat = (float(v) for v in value.split(","))
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected LON,LAT, got {value!r}") from None
    return [lon, lat]


def _filter_params(args: argparse.Namespace) -> FilterParams | None:
    params = FilterParams(
        created_from=args.created_from,
        created_to=args.created_to,
        modified_from=args.modified_from,
        modified_to=args.modified_to,
        size_from=args.file_size_from,
        size_to=args.file_size_to,
        location_coords=args.location,
        distance=args.distance,
        source=args.source,
        semantic_source=args.semantic_source,
        class_label=args.class_label,
        class_probability=args.class_probability,
        pipeline_label=args.pipeline,
    )
    return params if params != FilterParams() else None


def _searching_params(args: argparse.Namespace, kind) -> SearchingParams:
    return SearchingParams(
        indexes=args.index,
        kind=kind,
        result=_result_params(args),
        filter=_filter_params(args),
    )


def cmd_init(args: argparse.Namespace) -> None:
    """Init command - create ingest pipelines."""
    container.resolve(StorageService).init_pipelines(_knn_params())
    logger.info("Pipelines initialized")


def cmd_create_index(args: argparse.Namespace) -> None:
    params = CreateIndexParams(
        id=args.name,
        number_of_shards=args.shards,
        number_of_replicas=args.replicas,
        knn=_knn_params(),
    )
    _print_json({"index": container.resolve(StorageService).create_index(params)})


def cmd_delete_index(args: argparse.Namespace) -> None:
    container.resolve(StorageService).delete_index(args.name)


def cmd_indexes(args: argparse.Namespace) -> None:
    storage = container.resolve(StorageService)
    if args.name:
        _print_json(asdict(storage.get_index(args.name)))
    else:
        _print_json([asdict(info) for info in storage.get_all_indexes()])


def cmd_ingest(args: argparse.Namespace) -> None:
    """Ingest command - store documents of a folder."""
    count = container.resolve(StorageService).ingest_path(args.name, args.path or settings.docs_path)
    logger.info(f"Stored {count} documents")


def cmd_get_part(args: argparse.Namespace) -> None:
    part = container.resolve(StorageService).get_document_part(args.name, args.part_id)
    _print_json(asdict(part))


def cmd_get_parts(args: argparse.Namespace) -> None:
    parts = container.resolve(StorageService).get_document_parts(args.name, args.doc_id)
    _print_json([asdict(part) for part in parts])


def cmd_retrieve(args: argparse.Namespace) -> None:
    kind = RetrieveParams(path=args.path, large_doc_id=args.doc_id, doc_part_id=args.part_id)
    page = container.resolve(SearchService).retrieve(_searching_params(args, kind))
    _print_json(asdict(page))


def cmd_fulltext(args: argparse.Namespace) -> None:
    kind = FullTextParams(query=args.query, operator=MatchOperator(args.operator))
    if args.fields:
        kind.fields = args.fields
    page = container.resolve(SearchService).fulltext(_searching_params(args, kind))
    _print_json(asdict(page))


def cmd_semantic(args: argparse.Namespace) -> None:
    kind = SemanticParams(query=args.query, knn_amount=args.knn_amount)
    page = container.resolve(SearchService).semantic(_searching_params(args, kind))
    _print_json(asdict(page))


def cmd_hybrid(args: argparse.Namespace) -> None:
    kind = HybridParams(
        query=args.query,
        knn_amount=args.knn_amount,
        operator=MatchOperator(args.operator),
    )
    if args.fields:
        kind.fields = args.fields
    page = container.resolve(SearchService).hybrid(_searching_params(args, kind))
    _print_json(asdict(page))


def cmd_paginate(args: argparse.Namespace) -> None:
    page = container.resolve(SearchService).paginate(ScrollCursor(args.cursor), args.lifetime)
    _print_json(asdict(page))


def cmd_delete_session(args: argparse.Namespace) -> None:
    container.resolve(SearchService).delete_session(ScrollCursor(args.cursor))


def _add_search_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-i", "--index", action="append", required=True, help="Index to search")
    parser.add_argument("--size", type=int, default=10)
    parser.add_argument("--offset", type=int, default=0)
    parser.add_argument("--min-score", type=float)
    parser.add_argument("--order", choices=[o.value for o in ResultOrder], default="desc")
    parser.add_argument("--pre-tag", default="")
    parser.add_argument("--post-tag", default="")

    filters = parser.add_argument_group("filters")
    filters.add_argument("--created-from", type=int)
    filters.add_argument("--created-to", type=int)
    filters.add_argument("--modified-from", type=int)
    filters.add_argument("--modified-to", type=int)
    filters.add_argument("--file-size-from", type=int)
    filters.add_argument("--file-size-to", type=int)
    filters.add_argument("--location", type=_coords, help="Center point as LON,LAT")
    filters.add_argument("--distance", help="Radius like 5km")
    filters.add_argument("--source")
    filters.add_argument("--semantic-source")
    filters.add_argument("--class-label")
    filters.add_argument("--class-probability", type=float)
    filters.add_argument("--pipeline")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="docsearch", description="Document search middleware")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init", help="Create ingest pipelines").set_defaults(func=cmd_init)

    p = sub.add_parser("create-index", help="Create index")
    p.add_argument("name")
    p.add_argument("--shards", type=int, default=settings.number_of_shards)
    p.add_argument("--replicas", type=int, default=settings.number_of_replicas)
    p.set_defaults(func=cmd_create_index)

    p = sub.add_parser("delete-index", help="Delete index")
    p.add_argument("name")
    p.set_defaults(func=cmd_delete_index)

    p = sub.add_parser("indexes", help="Show one or all indexes")
    p.add_argument("name", nargs="?")
    p.set_defaults(func=cmd_indexes)

    p = sub.add_parser("ingest", help="Store plain-text documents of a folder")
    p.add_argument("name")
    p.add_argument("--path")
    p.set_defaults(func=cmd_ingest)

    p = sub.add_parser("get-part", help="Show one stored document part")
    p.add_argument("name")
    p.add_argument("part_id")
    p.set_defaults(func=cmd_get_part)

    p = sub.add_parser("get-parts", help="Show all parts of a document")
    p.add_argument("name")
    p.add_argument("doc_id")
    p.set_defaults(func=cmd_get_parts)

    p = sub.add_parser("retrieve", help="Retrieve documents by path or ids")
    p.add_argument("--path")
    p.add_argument("--doc-id")
    p.add_argument("--part-id", type=int)
    _add_search_args(p)
    p.set_defaults(func=cmd_retrieve)

    p = sub.add_parser("fulltext", help="Full-text search")
    p.add_argument("query", nargs="?")
    p.add_argument("--field", dest="fields", action="append")
    p.add_argument("--operator", choices=[o.value for o in MatchOperator], default="or")
    _add_search_args(p)
    p.set_defaults(func=cmd_fulltext)

    p = sub.add_parser("semantic", help="Semantic search")
    p.add_argument("query")
    p.add_argument("--knn-amount", type=int, default=settings.knn_amount)
    _add_search_args(p)
    p.set_defaults(func=cmd_semantic)

    p = sub.add_parser("hybrid", help="Hybrid search")
    p.add_argument("query")
    p.add_argument("--knn-amount", type=int, default=settings.knn_amount)
    p.add_argument("--field", dest="fields", action="append")
    p.add_argument("--operator", choices=[o.value for o in MatchOperator], default="or")
    _add_search_args(p)
    p.set_defaults(func=cmd_hybrid)

    p = sub.add_parser("paginate", help="Fetch next page of a scroll session")
    p.add_argument("cursor")
    p.add_argument("--lifetime", default=settings.pagination_lifetime)
    p.set_defaults(func=cmd_paginate)

    p = sub.add_parser("delete-session", help="Close scroll session")
    p.add_argument("cursor")
    p.set_defaults(func=cmd_delete_session)

    return parser


def main(argv: list[str] | None = None):
    """CLI entry point."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=settings.log_level, format="%(message)s")

    app = configure_container(settings)
    try:
        args.func(args)
    except DocSearchError as e:
        logger.error(f"{type(e).__name__}: {e}")
        sys.exit(1)
    finally:
        app.close()


if __name__ == "__main__":
    main()
