"""aptscore exceptions."""


class AptScoreError(Exception):
    """Base exception for all aptscore errors."""


class ValidationError(AptScoreError):
    """Input validation error tagged with the offending field.

    The field is a factor display name (e.g. "Floor Level") or an aggregate
    name such as "total_weight".
    """

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.message = message
        super().__init__(f"{message} (field: {field})")


class UnsupportedStrategyError(AptScoreError):
    """Raised when a strategy identifier is not registered."""

    def __init__(self, strategy: str) -> None:
        self.strategy = strategy
        super().__init__(f"Unsupported strategy: {strategy}")


class EvaluationError(AptScoreError):
    """Relative evaluation error."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class RankingError(AptScoreError):
    """Batch ranking aborted on an entity whose score could not be computed."""

    def __init__(self, entity_id: str, message: str) -> None:
        self.entity_id = entity_id
        self.message = message
        super().__init__(f"Failed to score entity {entity_id}: {message}")


class LoaderError(AptScoreError):
    """Base exception for loader errors."""

    def __init__(
        self,
        message: str,
        line: int | None = None,
        file_path: str | None = None,
    ):
        self.message = message
        self.line = line
        self.file_path = file_path

        location_parts = []
        if file_path:
            location_parts.append(f"File: {file_path}")
        if line is not None:
            location_parts.append(f"Line: {line}")

        if location_parts:
            full_message = f"{', '.join(location_parts)}: {message}"
        else:
            full_message = message

        super().__init__(full_message)


class ParseError(LoaderError):
    """YAML/JSON parsing error."""
