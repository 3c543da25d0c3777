"""Exceptions raised by the promotion engine."""


class MalformedRecordError(ValueError):
    """A promotion record whose discount shape cannot be scored."""

    def __init__(self, record_id: str, reason: str):
        self.record_id = record_id
        self.reason = reason
        super().__init__(f"Promotion record {record_id!r} is malformed: {reason}")


class CatalogError(RuntimeError):
    """The calendar catalog could not be read or parsed."""
