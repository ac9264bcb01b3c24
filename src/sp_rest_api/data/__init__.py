# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Request layer for the SharePoint REST list client.

This module contains URL building, list item type naming, single-request
execution, response normalization and pagination.
"""

__all__ = []
