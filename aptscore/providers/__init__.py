"""Collaborator contracts for context, supplementary data and personalization."""

from aptscore.providers.base import (
    ContextProvider,
    DataProvider,
    PersonalizationConsumer,
    apply_context,
    fill_missing_scores,
    personalize,
)

__all__ = [
    "ContextProvider",
    "DataProvider",
    "PersonalizationConsumer",
    "apply_context",
    "fill_missing_scores",
    "personalize",
]
