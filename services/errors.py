from __future__ import annotations


class ProjectionError(Exception):
    """Base class for errors surfaced to callers of the projection services."""


class TransactionValidationError(ProjectionError, ValueError):
    def __init__(self, index: int, errors: list[dict], record_id: str | None = None):
        self.index = index
        self.errors = errors
        self.record_id = record_id
        details = "; ".join(_format_error(e) for e in errors) or "invalid record"
        label = f"transaction #{index}" + (f" ({record_id})" if record_id else "")
        super().__init__(f"Invalid {label}: {details}")


class ConfigValidationError(ProjectionError, ValueError):
    def __init__(self, errors: list[dict]):
        self.errors = errors
        super().__init__("Invalid schedule config: " + "; ".join(_format_error(e) for e in errors))


class PayloadValidationError(ProjectionError, ValueError):
    """Top-level payload fields, such as the starting balance, failed validation."""

    def __init__(self, errors: list[dict]):
        self.errors = errors
        super().__init__("Invalid projection payload: " + "; ".join(_format_error(e) for e in errors))


def _format_error(error: dict) -> str:
    loc = ".".join(str(part) for part in error.get("loc", ()))
    msg = error.get("msg", "invalid value")
    return f"{loc}: {msg}" if loc else msg
