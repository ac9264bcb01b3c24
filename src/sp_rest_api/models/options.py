# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""List-scoped options, verbosity modes and filter predicates."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterable, Optional, Tuple

from ..common.constants import DEFAULT_MAX_ITEMS, MAX_ITEMS_LIMIT
from ..core._error_codes import (
    VALIDATION_FILTER_OPERATOR_UNKNOWN,
    VALIDATION_MAX_ITEMS_OUT_OF_RANGE,
    VALIDATION_VERBOSITY_UNKNOWN,
)
from ..core.errors import ValidationError

__all__ = ["Verbosity", "Filter", "ListOptions", "build_filter_expression", "SuccessCallback", "ErrorCallback"]

SuccessCallback = Callable[[Any], None]
ErrorCallback = Callable[[Exception], None]


class Verbosity(str, Enum):
    """OData metadata level negotiated with the server.

    The member value is the exact media type sent in ``Accept`` and
    ``Content-Type``. ``VERBOSE`` responses nest items under ``d.results``;
    ``MINIMAL`` and ``COMPACT`` responses carry them under ``value``.
    """

    VERBOSE = "application/json; odata=verbose"
    MINIMAL = "application/json; odata=minimalmetadata"
    COMPACT = "application/json; odata=nometadata"

    @property
    def media_type(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: Any) -> "Verbosity":
        """Accept a member, its media type, or its name (case-insensitive)."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            for member in cls:
                if value == member.value or value.upper() == member.name:
                    return member
        raise ValidationError(
            f"Unknown verbosity {value!r}; expected one of {[m.name for m in cls]}",
            subcode=VALIDATION_VERBOSITY_UNKNOWN,
        )


_COMPARISON_OPERATORS = ("eq", "ne", "gt", "ge", "lt", "le")
_FUNCTION_OPERATORS = ("startswith", "substringof")


def _format_value(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    # Escape single quotes for OData literals by doubling them
    return "'" + str(value).replace("'", "''") + "'"


@dataclass(frozen=True)
class Filter:
    """A single ``$filter`` predicate on a list field.

    :param field: Internal field name, e.g. ``"Title"`` or ``"FileDirRef"``.
    :type field: str
    :param value: Literal compared against the field. Strings are quoted and
        escaped; numbers and booleans are emitted bare.
    :param operator: One of ``eq ne gt ge lt le startswith substringof``.
    :type operator: str

    Example::

        Filter("Status", "Open")             # Status eq 'Open'
        Filter("Priority", 2, "gt")          # Priority gt 2
        Filter("Title", "Q3", "startswith")  # startswith(Title,'Q3')
    """

    field: str
    value: Any
    operator: str = "eq"

    def __post_init__(self) -> None:
        op = (self.operator or "").strip().lower()
        if op not in _COMPARISON_OPERATORS + _FUNCTION_OPERATORS:
            raise ValidationError(
                f"Unsupported filter operator {self.operator!r}",
                subcode=VALIDATION_FILTER_OPERATOR_UNKNOWN,
            )
        object.__setattr__(self, "operator", op)

    @classmethod
    def in_folder(cls, folder_url: str) -> "Filter":
        """Restrict a collection fetch to items directly inside a subfolder.

        :param folder_url: Server-relative folder URL, e.g. ``"/sites/hr/Lists/Tasks/2024"``.
        """
        return cls("FileDirRef", folder_url.rstrip("/"))

    def render(self) -> str:
        literal = _format_value(self.value)
        if self.operator == "startswith":
            return f"startswith({self.field},{literal})"
        if self.operator == "substringof":
            return f"substringof({literal},{self.field})"
        return f"{self.field} {self.operator} {literal}"


def build_filter_expression(filters: Iterable[Filter]) -> str:
    """Join predicates with ``and`` in the order given. Empty input yields ``""``."""
    return " and ".join(f.render() for f in filters)


@dataclass(frozen=True)
class ListOptions:
    """
    Options applied to list-scoped operations.

    Instances are immutable; use :meth:`merged` to derive a reconfigured copy.
    Every change is validated on construction.

    :param list_title: Display name of the target list. Required before any list operation.
    :type list_title: str
    :param max_items: Page size sent as ``$top``. With ``recursive_fetch`` this is the size
        of each page; otherwise the maximum number of items returned. 1 to 5000.
    :type max_items: int
    :param recursive_fetch: Follow next-links until every item has been fetched.
    :type recursive_fetch: bool
    :param verbosity: Metadata level requested from the server.
    :type verbosity: Verbosity
    :param site_url: Site URL overriding the one supplied by the site context.
    :type site_url: str or None
    :param token: Request digest overriding the one supplied by the site context.
    :type token: str or None
    :param on_success: Default success continuation.
    :param on_error: Default failure continuation.
    :param filters: Predicates AND-ed into ``$filter`` for collection fetches.
    :type filters: tuple[Filter, ...]
    """

    list_title: str = ""
    max_items: int = DEFAULT_MAX_ITEMS
    recursive_fetch: bool = False
    verbosity: Verbosity = Verbosity.VERBOSE
    site_url: Optional[str] = None
    token: Optional[str] = None
    on_success: Optional[SuccessCallback] = None
    on_error: Optional[ErrorCallback] = None
    filters: Tuple[Filter, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if isinstance(self.max_items, bool) or not isinstance(self.max_items, int):
            raise ValidationError(
                f"max_items must be an int, got {type(self.max_items).__name__}",
                subcode=VALIDATION_MAX_ITEMS_OUT_OF_RANGE,
            )
        if not 1 <= self.max_items <= MAX_ITEMS_LIMIT:
            raise ValidationError(
                f"max_items must be between 1 and {MAX_ITEMS_LIMIT}, got {self.max_items}",
                subcode=VALIDATION_MAX_ITEMS_OUT_OF_RANGE,
            )
        object.__setattr__(self, "verbosity", Verbosity.parse(self.verbosity))
        object.__setattr__(self, "list_title", (self.list_title or "").strip())
        object.__setattr__(self, "recursive_fetch", bool(self.recursive_fetch))
        object.__setattr__(self, "filters", tuple(self.filters or ()))

    def merged(self, **changes: Any) -> "ListOptions":
        """Return a validated copy with ``changes`` applied over these options."""
        return dataclasses.replace(self, **changes)
