"""Typed error hierarchy for the aggregation engine.

Every error carries a machine-readable ``code`` so the HTTP layer (or any
other caller) can branch on type instead of message text:

    MetricsEngineError
    +-- DataAccessError        repository fetch failed, never retried
    +-- InvalidInputError      malformed identifiers, windows or thresholds
    +-- RecordNotFoundError    single-entity lookup returned nothing

Missing but structurally valid data (null rates, null budgets, no logged
time) is not an error; calculators resolve it to neutral values.
"""

from __future__ import annotations


class MetricsEngineError(Exception):
    """Base class for all engine errors."""

    code: str = "METRICS_ENGINE_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class DataAccessError(MetricsEngineError):
    """Raised when the record store cannot serve a read."""

    code = "DATA_ACCESS_ERROR"

    def __init__(self, table: str, detail: str) -> None:
        self.table = table
        super().__init__(f"Failed to fetch {table}: {detail}")


class InvalidInputError(MetricsEngineError):
    """Raised before any fetch when caller input is malformed."""

    code = "INVALID_INPUT"

    def __init__(self, field: str, detail: str) -> None:
        self.field = field
        super().__init__(f"{field}: {detail}")


class RecordNotFoundError(MetricsEngineError):
    code = "RECORD_NOT_FOUND"

    def __init__(self, entity: str, record_id: object) -> None:
        self.entity = entity
        self.record_id = record_id
        super().__init__(f"{entity} {record_id} not found.")
