"""
core/errors.py — Domain error taxonomy.

Services raise these; the app factory maps them to HTTP responses:
  ValidationError -> 400 (with field-level detail)
  NotFoundError   -> 404
Store errors (sqlalchemy.exc.SQLAlchemyError) are never wrapped.
"""

from typing import Optional


class DomainError(Exception):
    """Base class for errors surfaced to the immediate caller."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"detail": self.message}


class ValidationError(DomainError):
    """Input rejected before any store call.

    ``errors`` is a list of ``{"field": ..., "message": ...}`` dicts.
    """

    status_code = 400

    def __init__(self, message: str = "Validation error", errors: Optional[list] = None):
        super().__init__(message)
        self.errors = errors or []

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(message, errors=[{"field": field, "message": message}])

    @classmethod
    def from_pydantic(cls, exc) -> "ValidationError":
        """Flatten a pydantic ValidationError into field-level detail."""
        errors = []
        for err in exc.errors():
            field = ".".join(str(part) for part in err.get("loc", ())) or None
            errors.append({"field": field, "message": err.get("msg", "Invalid value")})
        return cls("Validation error", errors=errors)

    def to_dict(self) -> dict:
        return {"detail": self.message, "errors": self.errors}


class UnknownFrequencyError(ValidationError):
    """A schedule carries a frequency with no defined calendar increment."""

    def __init__(self, frequency):
        message = f"Unknown maintenance frequency: {frequency!r}"
        super().__init__(message, errors=[{"field": "frequency", "message": message}])
        self.frequency = frequency


class NotFoundError(DomainError):
    """An operation referenced an id that does not exist."""

    status_code = 404

    def __init__(self, entity: str, entity_id):
        super().__init__(f"{entity} not found")
        self.entity = entity
        self.entity_id = entity_id
