# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Data models and type definitions for the SharePoint REST list client.

- :class:`~sp_rest_api.models.options.ListOptions`: Options for list-scoped operations.
- :class:`~sp_rest_api.models.options.Verbosity`: OData metadata level.
- :class:`~sp_rest_api.models.options.Filter`: ``$filter`` predicate.

Note:
    This ``__init__.py`` does NOT import/export models. Import directly from
    the specific module files.
"""

__all__ = []
