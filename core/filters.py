"""Search filter validation and normalisation.

Raw tool arguments become a :class:`FilterSet` through :func:`build_filter_set`,
the only constructor that enforces the filter invariants:

* every date matches ``M/D/YYYY`` (month 1-12, day 1-31, four-digit year);
* a recency window and explicit date bounds are never combined, which the
  ``temporal`` slot encodes directly since it holds one variant or the other;
* at most 20 domain entries, all allow-list or all deny-list (``-`` prefix).

Updates:
  v0.2.0 - 2026-10-11 - Model temporal filters as a recency/date-range union.
  v0.1.1 - 2026-10-08 - Accept "hour" as a recency window.
  v0.1.0 - 2026-10-06 - Introduce filter validation helpers.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Literal

from .exceptions import FilterError, FilterErrorKind, RequestValidationError

if TYPE_CHECKING:
    from collections.abc import Sequence

MAX_DOMAIN_FILTERS = 20
RECENCY_CHOICES: tuple[str, ...] = ("hour", "day", "week", "month", "year")
_DATE_PATTERN = re.compile(r"^(0?[1-9]|1[0-2])/(0?[1-9]|[12][0-9]|3[01])/[0-9]{4}$")

Recency = Literal["hour", "day", "week", "month", "year"]

# Tool argument name -> upstream request field.
DATE_FILTER_FIELDS: dict[str, str] = {
    "search_after_date": "search_after_date_filter",
    "search_before_date": "search_before_date_filter",
    "last_updated_after": "last_updated_after_filter",
    "last_updated_before": "last_updated_before_filter",
}


class DomainFilterMode(StrEnum):
    ALLOW = "allow"
    DENY = "deny"


@dataclass(slots=True, frozen=True)
class RecencyFilter:
    """Relative time window such as "past week"."""

    window: Recency

    def to_request_fields(self) -> dict[str, Any]:
        return {"search_recency_filter": self.window}


@dataclass(slots=True, frozen=True)
class DateRangeFilter:
    """Explicit publication and last-updated calendar bounds."""

    search_after_date: str | None = None
    search_before_date: str | None = None
    last_updated_after: str | None = None
    last_updated_before: str | None = None

    def to_request_fields(self) -> dict[str, Any]:
        fields: dict[str, Any] = {}
        for attribute, request_key in DATE_FILTER_FIELDS.items():
            value = getattr(self, attribute)
            if value:
                fields[request_key] = value
        return fields


TemporalFilter = RecencyFilter | DateRangeFilter


@dataclass(slots=True, frozen=True)
class DomainFilter:
    """Allow-list or deny-list of domains and URLs, in caller order."""

    entries: tuple[str, ...]
    mode: DomainFilterMode

    def to_request_fields(self) -> dict[str, Any]:
        return {"search_domain_filter": list(self.entries)}


@dataclass(slots=True, frozen=True)
class FilterSet:
    """Validated combination of temporal and domain constraints."""

    temporal: TemporalFilter | None = None
    domains: DomainFilter | None = None

    @property
    def is_empty(self) -> bool:
        return self.temporal is None and self.domains is None

    def to_request_fields(self) -> dict[str, Any]:
        """Return upstream request fields for every constraint that is set."""
        fields: dict[str, Any] = {}
        if self.temporal is not None:
            fields.update(self.temporal.to_request_fields())
        if self.domains is not None:
            fields.update(self.domains.to_request_fields())
        return fields


def is_valid_date(value: str) -> bool:
    """Return ``True`` when *value* matches the strict ``M/D/YYYY`` pattern."""
    return _DATE_PATTERN.fullmatch(value) is not None


def _validate_dates(dates: dict[str, str | None]) -> None:
    for name, value in dates.items():
        if value and not is_valid_date(value):
            raise FilterError(
                FilterErrorKind.BAD_DATE_FORMAT,
                f"{DATE_FILTER_FIELDS[name]} must be in M/D/YYYY format (e.g., '3/1/2025'), "
                f"got {value!r}",
                field=DATE_FILTER_FIELDS[name],
            )


def _resolve_domain_mode(entries: Sequence[str]) -> DomainFilterMode:
    if len(entries) > MAX_DOMAIN_FILTERS:
        raise FilterError(
            FilterErrorKind.TOO_MANY_DOMAINS,
            f"search_domain_filter can contain a maximum of {MAX_DOMAIN_FILTERS} domains/URLs "
            f"(got {len(entries)})",
            field="search_domain_filter",
        )
    has_deny = any(entry.startswith("-") for entry in entries)
    has_allow = any(not entry.startswith("-") for entry in entries)
    if has_deny and has_allow:
        raise FilterError(
            FilterErrorKind.MIXED_DOMAIN_MODE,
            "search_domain_filter cannot mix allowlist and denylist modes. Use either "
            "domains without '-' prefix (allowlist) or domains with '-' prefix (denylist), "
            "but not both.",
            field="search_domain_filter",
        )
    return DomainFilterMode.DENY if has_deny else DomainFilterMode.ALLOW


def build_filter_set(
    *,
    recency: str | None = None,
    search_after_date: str | None = None,
    search_before_date: str | None = None,
    last_updated_after: str | None = None,
    last_updated_before: str | None = None,
    domain_filter: Sequence[str] | None = None,
) -> FilterSet:
    """Validate raw filter arguments and return the matching :class:`FilterSet`.

    Empty strings and empty lists count as "not supplied".

    Raises:
      FilterError: When any filter invariant is violated. Checks run in a fixed
        order: date formats, recency/date conflict, domain count, domain mode.
    """
    dates = {
        "search_after_date": search_after_date or None,
        "search_before_date": search_before_date or None,
        "last_updated_after": last_updated_after or None,
        "last_updated_before": last_updated_before or None,
    }
    _validate_dates(dates)

    has_dates = any(dates.values())
    temporal: TemporalFilter | None = None
    if recency:
        if has_dates:
            raise FilterError(
                FilterErrorKind.CONFLICTING_FILTERS,
                "search_recency_filter cannot be combined with other date filters",
                field="search_recency_filter",
            )
        if recency not in RECENCY_CHOICES:
            raise RequestValidationError(
                f"search_recency_filter must be one of {', '.join(RECENCY_CHOICES)}, "
                f"got {recency!r}"
            )
        temporal = RecencyFilter(window=recency)  # type: ignore[arg-type]
    elif has_dates:
        temporal = DateRangeFilter(**dates)

    domains: DomainFilter | None = None
    if domain_filter:
        entries = tuple(str(entry) for entry in domain_filter)
        domains = DomainFilter(entries=entries, mode=_resolve_domain_mode(entries))

    return FilterSet(temporal=temporal, domains=domains)


def validate_filters(**filters: Any) -> None:
    """Validate filter arguments without keeping the resulting :class:`FilterSet`."""
    build_filter_set(**filters)


__all__ = [
    "DATE_FILTER_FIELDS",
    "MAX_DOMAIN_FILTERS",
    "RECENCY_CHOICES",
    "DateRangeFilter",
    "DomainFilter",
    "DomainFilterMode",
    "FilterSet",
    "RecencyFilter",
    "TemporalFilter",
    "build_filter_set",
    "is_valid_date",
    "validate_filters",
]
