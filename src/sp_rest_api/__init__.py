# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Client for SharePoint list items over the REST API.

Builds list and item URLs, attaches the request digest and verbosity headers,
tunnels DELETE/MERGE through POST, and stitches paginated collection responses
into one result.
"""

from .client import SpRestClient
from .core._auth import SiteContext, StaticSiteContext
from .core.config import SpRestConfig
from .core.errors import (
    SpRestError,
    ValidationError,
    MalformedResponseError,
    TokenUnavailableError,
    AuthenticationError,
    TransportError,
    HttpError,
)
from .models.options import Filter, ListOptions, Verbosity

__version__ = "0.1.0"

__all__ = [
    "SpRestClient",
    "SiteContext",
    "StaticSiteContext",
    "SpRestConfig",
    "ListOptions",
    "Verbosity",
    "Filter",
    "SpRestError",
    "ValidationError",
    "MalformedResponseError",
    "TokenUnavailableError",
    "AuthenticationError",
    "TransportError",
    "HttpError",
]
