"""Scoring document loader."""

from aptscore.loader.loader import DocumentLoader
from aptscore.loader.models import EntityDefinition, ScoringDocument
from aptscore.loader.parser import DocumentParser

__all__ = [
    "DocumentLoader",
    "DocumentParser",
    "EntityDefinition",
    "ScoringDocument",
]
