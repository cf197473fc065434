"""Document metadata models."""
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class DocumentLocation:
    """Named geo point."""
    name: str
    latitude: float
    longitude: float


@dataclass
class DocumentClass:
    """Classification label with its probability."""
    name: str
    probability: float


@dataclass
class DocumentMetadata:
    """Structured metadata attached to a document part."""
    photo: Optional[str] = None
    pipeline_id: Optional[int] = None
    source: Optional[str] = None
    semantic_source: Optional[str] = None
    summary: Optional[str] = None
    locations: list[DocumentLocation] = field(default_factory=list)
    subjects: list[str] = field(default_factory=list)
    classes: list[DocumentClass] = field(default_factory=list)
    icons: list[str] = field(default_factory=list)
    groups: list[str] = field(default_factory=list)
    pipelines: list[str] = field(default_factory=list)
    references: list[str] = field(default_factory=list)
