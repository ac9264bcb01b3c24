# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Shared pytest fixtures and configuration for SharePoint REST client tests.
"""

import pytest

from sp_rest_api.core._auth import StaticSiteContext
from sp_rest_api.core.config import SpRestConfig


SITE_URL = "https://contoso.sharepoint.com/sites/hr"


@pytest.fixture
def site_url():
    """Standard test site URL."""
    return SITE_URL


@pytest.fixture
def site_context():
    """Site context with an initial request digest."""
    return StaticSiteContext(SITE_URL, token="digest-0")


@pytest.fixture
def test_config():
    """Test configuration with retries disabled and a short timeout."""
    return SpRestConfig(http_retries=1, http_backoff=0.1, http_timeout=5)


@pytest.fixture
def sample_item():
    """Sample list item payload."""
    return {"Title": "Onboard new hire", "Status": "Open", "Priority": 2}
