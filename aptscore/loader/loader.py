"""Load scoring documents (weights, strategy, entities) from YAML or JSON."""

from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from aptscore.core.exceptions import AptScoreError, LoaderError
from aptscore.core.logging import get_logger
from aptscore.factors import parse_factor
from aptscore.loader.models import (
    UNIFORM_WEIGHTS,
    DocumentDefinition,
    ScoringDocument,
)
from aptscore.loader.parser import DocumentParser, line_of, to_plain
from aptscore.scoring.models import Entity
from aptscore.scoring.weights import prepare_weights, uniform_weights, weights_from_real

logger = get_logger(__name__)


class DocumentLoader:
    """Load and validate scoring documents.

    A document looks like::

        strategy: weighted_sum
        weights:
          school_district: 0.3
          apartment_size: 0.2
          ...
        entities:
          - id: apt-1
            name: Riverside 101
            location: Mapo
            scores:
              school_district: 85
              apartment_size: 70

    Weights are relative: they are normalized to sum to 1.0 before
    validation. ``weights: uniform`` gives every factor the same weight.
    Factors may be named by key ("school_district") or display name
    ("School District").
    """

    def __init__(self) -> None:
        self.parser = DocumentParser()

    def load_file(self, file_path: str | Path) -> ScoringDocument:
        """Load a document from a YAML or JSON file.

        Raises:
            ParseError: If the file cannot be parsed.
            LoaderError: If the content is invalid.
        """
        file_path = Path(file_path)
        data = self.parser.parse_file(file_path)
        return self._process_data(data, str(file_path))

    def load_string(self, content: str, fmt: str = "yaml") -> ScoringDocument:
        """Load a document from a YAML or JSON string.

        Raises:
            ParseError: If the content cannot be parsed.
            LoaderError: If the content is invalid.
        """
        if fmt == "json":
            data = self.parser.parse_json(content)
        else:
            data = self.parser.parse_yaml(content)
        return self._process_data(data, None)

    def _process_data(self, data: Any, file_path: str | None) -> ScoringDocument:
        if not isinstance(data, dict):
            raise LoaderError(
                "Document root must be a mapping",
                line=line_of(data),
                file_path=file_path,
            )

        self._validate_semantics(data, file_path)

        try:
            definition = DocumentDefinition(**to_plain(data))
        except PydanticValidationError as e:
            errors = []
            for error in e.errors():
                loc = ".".join(str(x) for x in error["loc"])
                errors.append(f"{loc}: {error['msg']}")
            error_msg = "Document validation failed:\n  " + "\n  ".join(errors)
            raise LoaderError(error_msg, file_path=file_path) from e

        try:
            if definition.weights == UNIFORM_WEIGHTS:
                weights = uniform_weights()
            else:
                weights = prepare_weights(weights_from_real(definition.weights))
        except (AptScoreError, KeyError) as e:
            raise LoaderError(
                f"Invalid weights: {e}",
                line=line_of(data, "weights"),
                file_path=file_path,
            ) from e

        entities = [
            Entity.from_real_scores(
                id=item.id,
                name=item.name,
                location=item.location,
                scores=item.scores,
            )
            for item in definition.entities
        ]

        logger.debug(
            "document_loaded",
            source=file_path,
            entities=len(entities),
            strategy=definition.strategy,
        )
        return ScoringDocument(
            weights=weights,
            strategy=definition.strategy,
            entities=entities,
            source=file_path,
        )

    def _validate_semantics(self, data: dict[str, Any], file_path: str | None) -> None:
        """Check for duplicate entity ids and unknown factor names.

        Raises:
            LoaderError: Pointing at the first offending line when known.
        """
        weights = data.get("weights")
        if isinstance(weights, dict):
            for key in weights:
                self._check_factor(key, line_of(weights, key), file_path)

        entities = data.get("entities")
        if not isinstance(entities, list):
            return

        seen: set[str] = set()
        for index, item in enumerate(entities):
            if not isinstance(item, dict):
                continue
            entity_id = item.get("id")
            if entity_id is not None:
                if str(entity_id) in seen:
                    raise LoaderError(
                        f"Duplicate entity id '{entity_id}' at entities[{index}]",
                        line=line_of(item),
                        file_path=file_path,
                    )
                seen.add(str(entity_id))

            scores = item.get("scores")
            if isinstance(scores, dict):
                for key in scores:
                    self._check_factor(key, line_of(scores, key), file_path)

    @staticmethod
    def _check_factor(key: Any, line: int | None, file_path: str | None) -> None:
        try:
            parse_factor(str(key))
        except KeyError as e:
            raise LoaderError(
                f"Unknown factor '{key}'", line=line, file_path=file_path
            ) from e
