"""Placement of locally defined members along one absolute parameter axis.

Piecewise functions and composite curves are stored as an ordered list of
members, each defined on its own local domain starting at (typically) 0,
together with the absolute domain each member serves and the absolute
start that maps the absolute parameter back into the member's local one.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Generic, List, Protocol, Sequence, TypeVar

from roadgeom.errors import AmbiguousSelectionError, DomainError, Location
from roadgeom.range import Range, check_contiguous, span_of
from roadgeom.result import Err, Ok, Result

logger = logging.getLogger(__name__)


class DefinableDomain(Protocol):
    domain: Range


T = TypeVar("T", bound=DefinableDomain)


@dataclass(frozen=True)
class LocalRequest(Generic[T]):
    """A member selected for an absolute parameter, with its local parameter."""

    member: T
    local_parameter: float
    index: int


class ConcatenationContainer(Generic[T]):
    """Ordered, contiguous members addressed by an absolute parameter."""

    def __init__(self, members: Sequence[T], absolute_domains: Sequence[Range],
                 absolute_starts: Sequence[float], tolerance: float):
        if not members:
            raise ValueError("concatenation container requires at least one member")
        if not (len(members) == len(absolute_domains) == len(absolute_starts)):
            raise ValueError("members, absolute domains and absolute starts must have the same size")
        if not (math.isfinite(tolerance) and tolerance >= 0):
            raise ValueError(f"tolerance must be finite and non-negative, got {tolerance!r}")
        if any(not math.isfinite(start) for start in absolute_starts):
            raise ValueError("absolute starts must be finite")

        lowers = [d.lower if d.has_lower_bound() else -math.inf for d in absolute_domains]
        if any(b < a for a, b in zip(lowers, lowers[1:])):
            raise ValueError("absolute domains must be sorted ascending")
        check_contiguous(list(absolute_domains))

        for index, (member, domain, start) in enumerate(zip(members, absolute_domains, absolute_starts)):
            local_shifted = member.domain.shift(start)
            if not local_shifted.fuzzy_encloses(domain, tolerance):
                raise ValueError(
                    f"member {index} with domain {local_shifted} (shifted by {start}) "
                    f"does not enclose its absolute domain {domain}")

        self.members: List[T] = list(members)
        self.absolute_domains: List[Range] = list(absolute_domains)
        self.absolute_starts: List[float] = [float(s) for s in absolute_starts]
        self.tolerance = float(tolerance)
        self.domain = span_of(self.absolute_domains)

    @classmethod
    def of_lengths(cls, members: Sequence[T], start: float = 0.0,
                   tolerance: float = 0.0) -> "ConcatenationContainer[T]":
        """Place members end to end according to the lengths of their domains.

        Every member but the last serves a closed-open slice, the last one its
        full (possibly unbounded) shifted domain.
        """

        if not members:
            raise ValueError("concatenation container requires at least one member")
        domains: List[Range] = []
        starts: List[float] = []
        position = start
        for index, member in enumerate(members):
            local = member.domain
            offset = position - local.lower_endpoint()
            starts.append(offset)
            if index == len(members) - 1:
                domains.append(local.shift(offset))
            else:
                end = position + local.length()
                domains.append(Range.closed_open(position, end))
                position = end
        return cls(members, domains, starts, tolerance)

    def __len__(self) -> int:
        return len(self.members)

    def _resolve(self, parameter: float, matches: List[int]) -> Result[LocalRequest[T]]:
        if not matches:
            return Err(DomainError(f"parameter x={parameter!r} must be within the domain {self.domain}",
                                   Location(parameter=parameter)))
        if len(matches) > 1:
            return Err(AmbiguousSelectionError(
                f"parameter x={parameter!r} is claimed by members {matches}",
                Location(parameter=parameter)))
        index = matches[0]
        return Ok(LocalRequest(self.members[index], parameter - self.absolute_starts[index], index))

    def strict_select_member(self, parameter: float) -> Result[LocalRequest[T]]:
        """Select the single member whose absolute domain contains ``parameter``."""

        matches = [i for i, d in enumerate(self.absolute_domains) if parameter in d]
        return self._resolve(parameter, matches)

    def fuzzy_select_member(self, parameter: float, tolerance: float) -> Result[LocalRequest[T]]:
        """Strict selection first, then selection by tolerant containment."""

        strict = self.strict_select_member(parameter)
        if strict.is_ok():
            return strict
        matches = [i for i, d in enumerate(self.absolute_domains) if d.fuzzy_contains(parameter, tolerance)]
        logger.debug("fuzzy selection of parameter %r matched members %s", parameter, matches)
        return self._resolve(parameter, matches)


__all__ = ["DefinableDomain", "LocalRequest", "ConcatenationContainer"]
