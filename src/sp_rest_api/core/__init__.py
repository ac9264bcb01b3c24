# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Core infrastructure components for the SharePoint REST list client.

This module contains the foundational components including site context,
configuration, HTTP client, transport, telemetry, and error handling.
"""

from .config import SpRestConfig
from .errors import (
    SpRestError,
    ValidationError,
    MalformedResponseError,
    TokenUnavailableError,
    AuthenticationError,
    TransportError,
    HttpError,
)

__all__ = [
    "SpRestConfig",
    "SpRestError",
    "ValidationError",
    "MalformedResponseError",
    "TokenUnavailableError",
    "AuthenticationError",
    "TransportError",
    "HttpError",
]
