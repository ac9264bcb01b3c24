# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Site context and optional Azure Identity authentication.

A :class:`SiteContext` supplies the default site URL and request digest the
client starts from. Inside a hosted page these come from page state; outside
it, pass a :class:`StaticSiteContext`. An Azure AD ``TokenCredential`` can be
layered on top to send a bearer token with every request.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable
from urllib.parse import urlsplit

from azure.core.credentials import TokenCredential


@runtime_checkable
class SiteContext(Protocol):
    """Supplies the ambient site URL and initial request digest."""

    @property
    def site_url(self) -> str: ...

    @property
    def token(self) -> str: ...


@dataclass(frozen=True)
class StaticSiteContext:
    """Site context with explicitly supplied values.

    :param site_url: Absolute site URL, e.g. ``"https://contoso.sharepoint.com/sites/hr"``.
    :param token: Initial request digest. May be empty until the first refresh.
    """

    site_url: str
    token: str = ""


@dataclass
class TokenPair:
    resource: str
    access_token: str


class _AuthManager:
    """Azure Identity-based bearer token helper for SharePoint Online."""

    def __init__(self, credential: TokenCredential) -> None:
        if not isinstance(credential, TokenCredential):
            raise TypeError("credential must implement azure.core.credentials.TokenCredential.")
        self.credential: TokenCredential = credential

    @staticmethod
    def scope_for(site_url: str) -> str:
        """Return the ``.default`` scope for the tenant host of ``site_url``."""
        parts = urlsplit(site_url)
        return f"{parts.scheme}://{parts.netloc}/.default"

    def _acquire_token(self, scope: str) -> TokenPair:
        """Acquire an access token for the given scope using Azure Identity."""
        token = self.credential.get_token(scope)
        return TokenPair(resource=scope, access_token=token.token)
