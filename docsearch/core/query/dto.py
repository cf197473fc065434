"""Wire representation of stored documents and search hits."""

import logging
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from ..models.document import DocumentPart, Embeddings
from ..models.metadata import DocumentClass, DocumentLocation, DocumentMetadata
from ..models.searching import FoundedDocument

logger = logging.getLogger(__name__)


class NamedItem(BaseModel):
    name: str


class LocationItem(BaseModel):
    name: str
    coords: list[float]  # [longitude, latitude]


class ClassItem(BaseModel):
    name: str
    probability: float


class SourceMetadata(BaseModel):
    """Metadata as stored in the index."""
    photo: Optional[str] = None
    pipeline_id: Optional[int] = None
    source: Optional[str] = None
    semantic_source: Optional[str] = None
    summary: Optional[str] = None
    locations: list[LocationItem] = Field(default_factory=list)
    subjects: list[NamedItem] = Field(default_factory=list)
    classes: list[ClassItem] = Field(default_factory=list)
    icons: list[NamedItem] = Field(default_factory=list)
    groups: list[NamedItem] = Field(default_factory=list)
    pipelines: list[str] = Field(default_factory=list)
    references: list[str] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, metadata: DocumentMetadata) -> "SourceMetadata":
        return cls(
            photo=metadata.photo,
            pipeline_id=metadata.pipeline_id,
            source=metadata.source,
            semantic_source=metadata.semantic_source,
            summary=metadata.summary,
            locations=[
                LocationItem(name=loc.name, coords=[loc.longitude, loc.latitude])
                for loc in metadata.locations
            ],
            subjects=[NamedItem(name=name) for name in metadata.subjects],
            classes=[
                ClassItem(name=cls_.name, probability=cls_.probability)
                for cls_ in metadata.classes
            ],
            icons=[NamedItem(name=name) for name in metadata.icons],
            groups=[NamedItem(name=name) for name in metadata.groups],
            pipelines=list(metadata.pipelines),
            references=list(metadata.references),
        )

    def to_domain(self) -> DocumentMetadata:
        locations = [
            DocumentLocation(name=loc.name, longitude=loc.coords[0], latitude=loc.coords[1])
            for loc in self.locations
            if len(loc.coords) >= 2
        ]
        return DocumentMetadata(
            photo=self.photo,
            pipeline_id=self.pipeline_id,
            source=self.source,
            semantic_source=self.semantic_source,
            summary=self.summary,
            locations=locations,
            subjects=[item.name for item in self.subjects],
            classes=[DocumentClass(name=c.name, probability=c.probability) for c in self.classes],
            icons=[item.name for item in self.icons],
            groups=[item.name for item in self.groups],
            pipelines=list(self.pipelines),
            references=list(self.references),
        )


class EmbeddingsItem(BaseModel):
    knn: list[float]


class SourceDocument(BaseModel):
    """Document part as stored in the index."""
    large_doc_id: str
    doc_part_id: int
    file_name: str
    file_path: str
    file_size: int
    created_at: int
    modified_at: int
    content: Optional[str] = None
    chunked_text: Optional[list[str]] = None
    embeddings: Optional[list[EmbeddingsItem]] = None
    metadata: Optional[dict[str, Any]] = None

    @classmethod
    def from_domain(cls, part: DocumentPart) -> "SourceDocument":
        metadata = None
        if part.metadata is not None:
            metadata = SourceMetadata.from_domain(part.metadata).model_dump()

        embeddings = None
        if part.embeddings is not None:
            embeddings = [EmbeddingsItem(knn=list(e.knn)) for e in part.embeddings]

        return cls(
            large_doc_id=part.large_doc_id,
            doc_part_id=part.doc_part_id,
            file_name=part.file_name,
            file_path=part.file_path,
            file_size=part.file_size,
            created_at=part.created_at,
            modified_at=part.modified_at,
            content=part.content,
            chunked_text=part.chunked_text,
            embeddings=embeddings,
            metadata=metadata,
        )

    def to_domain(self) -> DocumentPart:
        embeddings = None
        if self.embeddings is not None:
            embeddings = [Embeddings(knn=item.knn) for item in self.embeddings]

        return DocumentPart(
            large_doc_id=self.large_doc_id,
            doc_part_id=self.doc_part_id,
            file_name=self.file_name,
            file_path=self.file_path,
            file_size=self.file_size,
            created_at=self.created_at,
            modified_at=self.modified_at,
            content=self.content,
            chunked_text=self.chunked_text,
            embeddings=embeddings,
            metadata=self._metadata_to_domain(),
        )

    def to_body(self) -> dict[str, Any]:
        """Serialize for indexing, skipping absent fields."""
        return self.model_dump(exclude_none=True)

    def _metadata_to_domain(self) -> Optional[DocumentMetadata]:
        # Broken metadata does not invalidate the document itself
        if self.metadata is None:
            return None
        try:
            return SourceMetadata.model_validate(self.metadata).to_domain()
        except PydanticValidationError as e:
            logger.debug(f"Skip malformed metadata of {self.large_doc_id}: {e}")
            return None


class FoundedDocumentInfo(BaseModel):
    """Raw search hit."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    index: str = Field(alias="_index")
    score: Optional[float] = Field(default=None, alias="_score")
    source: SourceDocument = Field(alias="_source")
    highlight: Optional[dict[str, list[str]]] = None

    def highlight_snippets(self) -> list[str]:
        """Flatten highlights, content field first."""
        if not self.highlight:
            return []

        snippets = list(self.highlight.get("content", []))
        for field_name, fragments in self.highlight.items():
            if field_name != "content":
                snippets.extend(fragments)
        return snippets

    def to_founded(self) -> FoundedDocument:
        return FoundedDocument(
            id=self.id,
            index=self.index,
            score=self.score,
            highlight=self.highlight_snippets(),
            document=self.source.to_domain(),
        )
