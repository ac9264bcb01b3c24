# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Resource URL construction for list, item, user and context info endpoints."""

from __future__ import annotations

import re
from typing import Union
from urllib.parse import quote

from ..common.constants import (
    CONTEXT_INFO_PATH,
    LIST_ITEM_PATH,
    LIST_ITEMS_PATH,
    QUERY_FILTER,
    QUERY_TOP,
    USER_BY_ID_PATH,
)
from ..core._error_codes import (
    VALIDATION_ITEM_ID_INVALID,
    VALIDATION_LIST_TITLE_MISSING,
    VALIDATION_SITE_URL_MISSING,
    VALIDATION_USER_ID_INVALID,
)
from ..core.errors import ValidationError

_TOP_RE = re.compile(r"([?&])" + re.escape(QUERY_TOP) + r"=[^&#]*")

# Characters left as-is inside a $filter expression; everything else that can
# end or corrupt a query value (& # + % ...) is percent-encoded.
_FILTER_SAFE = "'(),/ "
# A list title sits inside the path: "#", "?", "%" and "/" must be encoded.
_TITLE_SAFE = "'& "

Key = Union[int, str]


def _escape_odata_quotes(value: str) -> str:
    """Escape single quotes for OData string literals (by doubling them)."""
    return value.replace("'", "''")


def _path_title(title: str) -> str:
    """OData-quote and percent-encode a list title for use inside getbytitle('...')."""
    return quote(_escape_odata_quotes(title), safe=_TITLE_SAFE)


def _site(site_url: str) -> str:
    site = (site_url or "").strip().rstrip("/")
    if not site:
        raise ValidationError("site_url is required", subcode=VALIDATION_SITE_URL_MISSING)
    return site


def _require_list_title(list_title: str) -> str:
    title = (list_title or "").strip()
    if not title:
        raise ValidationError(
            "A list title is required; call lists(<title>) first",
            subcode=VALIDATION_LIST_TITLE_MISSING,
        )
    return title


def _format_key(key: Key, *, what: str, subcode: str) -> str:
    """Validate a positive integer key and return its URL form.

    Zero, negative numbers, booleans, empty strings and non-numeric strings are
    rejected before any request is built.
    """
    if isinstance(key, bool) or key is None:
        raise ValidationError(f"{what} must be a positive integer, got {key!r}", subcode=subcode)
    if isinstance(key, int):
        value = key
    elif isinstance(key, str) and key.strip().isdigit():
        value = int(key.strip())
    else:
        raise ValidationError(f"{what} must be a positive integer, got {key!r}", subcode=subcode)
    if value <= 0:
        raise ValidationError(f"{what} must be a positive integer, got {key!r}", subcode=subcode)
    return str(value)


def collection_url(site_url: str, list_title: str) -> str:
    """URL of the items collection of ``list_title``."""
    title = _require_list_title(list_title)
    return _site(site_url) + LIST_ITEMS_PATH.format(list_title=_path_title(title))


def item_url(site_url: str, list_title: str, item_id: Key) -> str:
    """URL of a single list item.

    :raises ValidationError: If ``item_id`` is zero, empty, or not a positive integer.
    """
    key = _format_key(item_id, what="item_id", subcode=VALIDATION_ITEM_ID_INVALID)
    title = _require_list_title(list_title)
    return _site(site_url) + LIST_ITEM_PATH.format(list_title=_path_title(title), item_id=key)


def user_url(site_url: str, user_id: Key) -> str:
    """URL of a site user, with group membership expanded."""
    key = _format_key(user_id, what="user_id", subcode=VALIDATION_USER_ID_INVALID)
    return _site(site_url) + USER_BY_ID_PATH.format(user_id=key)


def context_info_url(site_url: str) -> str:
    return _site(site_url) + CONTEXT_INFO_PATH


def with_page_limit(url: str, limit: int) -> str:
    """Apply ``$top=<limit>``, leaving exactly one ``$top`` in the query string.

    The first existing ``$top`` is replaced in place and any further ones are dropped.
    """
    param = f"{QUERY_TOP}={int(limit)}"
    replaced = []

    def _replace_first(match: "re.Match[str]") -> str:
        if replaced:
            return ""
        replaced.append(match)
        return match.group(1) + param

    result = _TOP_RE.sub(_replace_first, url)
    if replaced:
        return result
    sep = "&" if "?" in url else "?"
    return f"{url}{sep}{param}"


def with_filter(url: str, filter_expression: str) -> str:
    """Append a percent-encoded ``$filter``.

    Collection URLs always carry ``$top`` first, so ``&`` is the separator.
    """
    if not filter_expression:
        return url
    return f"{url}&{QUERY_FILTER}={quote(filter_expression, safe=_FILTER_SAFE)}"
