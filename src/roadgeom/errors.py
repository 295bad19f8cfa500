"""
Error kinds reported by the geometry core.

Evaluation and generation failures are returned as values wrapped in
:class:`roadgeom.result.Err`; the exception classes below are the payloads.
Construction of a geometric object with invalid input raises ``ValueError``
immediately instead.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Categories of failures the core can report."""
    DOMAIN = "domain"
    AMBIGUOUS_SELECTION = "ambiguous-selection"
    NUMERICAL_DEGENERACY = "numerical-degeneracy"
    BREP_GENERATION = "brep-generation"


@dataclass(frozen=True)
class Location:
    """Where an error occurred: an optional parameter and a free-form context."""
    parameter: Optional[float] = None
    context: str = ""

    def format(self) -> str:
        parts = []
        if self.context:
            parts.append(self.context)
        if self.parameter is not None:
            parts.append(f"at parameter {self.parameter!r}")
        return " ".join(parts)


class GeometryError(Exception):
    """Base exception for errors reported by the geometry core."""

    kind: ErrorKind = ErrorKind.DOMAIN

    def __init__(self, message: str, location: Optional[Location] = None):
        self.message = message
        self.location = location or Location()
        super().__init__(message)

    def __str__(self) -> str:
        where = self.location.format()
        if where:
            return f"{self.kind.value}: {self.message} ({where})"
        return f"{self.kind.value}: {self.message}"

    def __eq__(self, other) -> bool:
        return (type(self) is type(other)
                and self.message == other.message
                and self.location == other.location)

    def __hash__(self) -> int:
        return hash((type(self), self.message, self.location))


class DomainError(GeometryError):
    """Evaluation requested outside the domain of a function or curve."""
    kind = ErrorKind.DOMAIN


class AmbiguousSelectionError(GeometryError):
    """More than one concatenated member claims the same parameter."""
    kind = ErrorKind.AMBIGUOUS_SELECTION


class NumericalDegeneracyError(GeometryError):
    """Zero-length vectors, singular matrices or non-finite intermediate values."""
    kind = ErrorKind.NUMERICAL_DEGENERACY


class BoundaryRepresentationGenerationError(GeometryError):
    """A surface or solid could not be converted into planar polygons."""
    kind = ErrorKind.BREP_GENERATION


__all__ = [
    "ErrorKind",
    "Location",
    "GeometryError",
    "DomainError",
    "AmbiguousSelectionError",
    "NumericalDegeneracyError",
    "BoundaryRepresentationGenerationError",
]
