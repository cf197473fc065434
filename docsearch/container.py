import logging
from dataclasses import dataclass, field
from typing import Any, Callable, TypeVar

from .config.settings import Settings
from .core.errors import ValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class Container:
    """Registry of lazily built service instances keyed by type."""

    _factories: dict[type, Callable[[], Any]] = field(default_factory=dict)
    _singletons: dict[type, Any] = field(default_factory=dict)
    _singleton_flags: set[type] = field(default_factory=set)

    def register(
        self, interface: type[T], factory: Callable[[], T], singleton: bool = False
    ) -> None:
        """Register factory for interface.

        Re-registering drops an instance already cached for it.

        Args:
            interface: Interface type.
            factory: Factory function.
            singleton: Whether to cache instance.
        """
        self._factories[interface] = factory
        self._singletons.pop(interface, None)
        if singleton:
            self._singleton_flags.add(interface)
        else:
            self._singleton_flags.discard(interface)

    def override(self, interface: type[T], instance: T) -> None:
        """Pin ready instance, e.g. a fake client in tests."""
        self._factories[interface] = lambda: instance
        self._singletons[interface] = instance

    def resolve(self, interface: type[T]) -> T:
        if interface in self._singletons:
            return self._singletons[interface]

        if interface not in self._factories:
            raise KeyError(f"No factory registered for {interface.__name__}")

        instance = self._factories[interface]()

        if interface in self._singleton_flags:
            self._singletons[interface] = instance

        return instance

    def close(self) -> None:
        """Close cached instances holding connections and drop them."""
        closed = set()
        for instance in self._singletons.values():
            close = getattr(instance, "close", None)
            if callable(close) and id(instance) not in closed:
                closed.add(id(instance))
                close()
        self._singletons.clear()

    def reset(self) -> None:
        """Reset singletons (for testing)."""
        self._singletons.clear()


container = Container()


def configure_container(settings: Settings) -> Container:
    """Configure container with all dependencies.

    Args:
        settings: Application settings.

    Returns:
        Configured container.
    """
    from .core.protocols.embedder import EmbedderProtocol
    from .core.protocols.search_engine import (
        DocumentStorageProtocol,
        IndexStorageProtocol,
        SearchEngineProtocol,
    )
    from .core.services.paginator_service import PaginatorService
    from .core.services.search_service import SearchService
    from .core.services.storage_service import StorageService
    from .infrastructure.opensearch import OpenSearchClient

    container.register(
        OpenSearchClient,
        lambda: OpenSearchClient(
            address=settings.opensearch_address,
            username=settings.opensearch_username,
            password=settings.opensearch_password,
            verify_certs=settings.opensearch_verify_certs,
            timeout=settings.opensearch_timeout,
            model_id=settings.knn_model_id,
        ),
        singleton=True,
    )

    # One client serves all engine roles
    for protocol in (SearchEngineProtocol, IndexStorageProtocol, DocumentStorageProtocol):
        container.register(protocol, lambda: container.resolve(OpenSearchClient), singleton=True)

    container.register(
        EmbedderProtocol,
        lambda: _build_embedder(settings),
        singleton=True,
    )

    container.register(
        PaginatorService,
        lambda: PaginatorService(
            engine=container.resolve(SearchEngineProtocol),
            lifetime=settings.pagination_lifetime,
        ),
        singleton=True,
    )

    container.register(
        SearchService,
        lambda: SearchService(
            engine=container.resolve(SearchEngineProtocol),
            paginator=container.resolve(PaginatorService),
            embedder=container.resolve(EmbedderProtocol),
            scroll_lifetime=settings.scroll_lifetime,
            knn_ef_search=settings.knn_ef_search,
        ),
        singleton=True,
    )

    # Parts are embedded by the ingest pipeline when a model is deployed
    container.register(
        StorageService,
        lambda: StorageService(
            indexes=container.resolve(IndexStorageProtocol),
            documents=container.resolve(DocumentStorageProtocol),
            engine=container.resolve(SearchEngineProtocol),
            paginator=container.resolve(PaginatorService),
            embedder=None if settings.knn_model_id else container.resolve(EmbedderProtocol),
            max_content_size=settings.max_content_size,
            overlap_rate=settings.overlap_rate,
            scroll_lifetime=settings.scroll_lifetime,
        ),
        singleton=True,
    )

    logger.info("Container configured")
    return container


def _build_embedder(settings: Settings):
    if settings.embedder_kind == "http":
        from .infrastructure.embeddings.http_embedder import HttpEmbedder

        return HttpEmbedder(
            address=settings.embeddings_address,
            model=settings.embeddings_model,
            timeout=settings.embeddings_timeout,
        )

    if settings.embedder_kind == "local":
        from .infrastructure.embeddings.sentence_transformer import (
            SentenceTransformerEmbedder,
        )

        return SentenceTransformerEmbedder(
            settings.embedding_model,
            query_prefix=settings.embedding_query_prefix,
            passage_prefix=settings.embedding_passage_prefix,
        )

    if settings.embedder_kind == "none":
        return None

    raise ValidationError(f"unknown embedder kind: {settings.embedder_kind}")
