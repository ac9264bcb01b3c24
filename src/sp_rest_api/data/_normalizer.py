# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Verbosity-dependent response shapes.

==========  ===============  ==================================
Verbosity   items            next page
==========  ===============  ==================================
VERBOSE     ``d.results``    ``d.__next``
MINIMAL     ``value``        ``odata.nextLink``
COMPACT     ``value``        ``odata.nextLink``
==========  ===============  ==================================
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..common.constants import (
    ODATA_NEXT_LINK,
    ODATA_NEXT_LINK_V4,
    ODATA_VALUE,
    VERBOSE_ENVELOPE,
    VERBOSE_NEXT_LINK,
    VERBOSE_RESULTS,
)
from ..core._error_codes import (
    MALFORMED_NEXT_LINK,
    MALFORMED_VALUE_MISSING,
    MALFORMED_VERBOSE_ENVELOPE,
)
from ..core.errors import MalformedResponseError
from ..models.options import Verbosity


def extract_page(response: Any, verbosity: Verbosity) -> Tuple[List[Any], Optional[str]]:
    """Return ``(items, next_link)`` from one page of a collection response.

    :raises MalformedResponseError: If the container expected for ``verbosity`` is absent.
    """
    if verbosity is Verbosity.VERBOSE:
        envelope = response.get(VERBOSE_ENVELOPE) if isinstance(response, dict) else None
        if not isinstance(envelope, dict) or not isinstance(envelope.get(VERBOSE_RESULTS), list):
            raise MalformedResponseError(
                "Verbose response has no 'd.results' array",
                subcode=MALFORMED_VERBOSE_ENVELOPE,
                details={"keys": _keys(response)},
            )
        items = envelope[VERBOSE_RESULTS]
        next_link = envelope.get(VERBOSE_NEXT_LINK)
    else:
        items = response.get(ODATA_VALUE) if isinstance(response, dict) else None
        if not isinstance(items, list):
            raise MalformedResponseError(
                "Response has no 'value' array",
                subcode=MALFORMED_VALUE_MISSING,
                details={"keys": _keys(response)},
            )
        next_link = response.get(ODATA_NEXT_LINK) or response.get(ODATA_NEXT_LINK_V4)

    if next_link is not None and not isinstance(next_link, str):
        raise MalformedResponseError(
            f"Next link must be a string, got {type(next_link).__name__}",
            subcode=MALFORMED_NEXT_LINK,
        )
    return list(items), next_link or None


def wrap(items: Sequence[Any], verbosity: Verbosity) -> Dict[str, Any]:
    """Embed ``items`` in the shape a single, unpaginated response would have."""
    if verbosity is Verbosity.VERBOSE:
        return {VERBOSE_ENVELOPE: {VERBOSE_RESULTS: list(items)}}
    return {ODATA_VALUE: list(items)}


def _keys(response: Any) -> List[str]:
    return sorted(response.keys()) if isinstance(response, dict) else []
