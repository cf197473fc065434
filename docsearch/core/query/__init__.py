"""Engine query composition and response extraction."""
from .composer import EngineQuery, compose
from .extractor import extract

__all__ = [
    "EngineQuery",
    "compose",
    "extract",
]
