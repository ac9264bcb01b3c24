# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Wire-level constants for the SharePoint REST list API.

These constants define the resource path templates, header names and
OData response keys shared by the request and response layers.
"""

# Resource path templates (relative to the site URL)
LIST_ITEMS_PATH = "/_api/web/lists/getbytitle('{list_title}')/items"
LIST_ITEM_PATH = "/_api/web/lists/getbytitle('{list_title}')/items({item_id})"
USER_BY_ID_PATH = "/_api/web/GetUserById({user_id})?$expand=Groups"
CONTEXT_INFO_PATH = "/_api/contextinfo"

# Query options
QUERY_TOP = "$top"
QUERY_FILTER = "$filter"

# Request headers
HEADER_ACCEPT = "Accept"
HEADER_CONTENT_TYPE = "Content-Type"
HEADER_REQUEST_DIGEST = "X-RequestDigest"
HEADER_HTTP_METHOD = "X-HTTP-Method"
HEADER_IF_MATCH = "If-Match"
HEADER_AUTHORIZATION = "Authorization"

# Verbose ("odata=verbose") response keys
VERBOSE_ENVELOPE = "d"
VERBOSE_RESULTS = "results"
VERBOSE_NEXT_LINK = "__next"
VERBOSE_METADATA = "__metadata"

# Minimal/no-metadata response keys. Older servers emit the dotted key, newer
# ones the "@" prefixed form.
ODATA_VALUE = "value"
ODATA_NEXT_LINK = "odata.nextLink"
ODATA_NEXT_LINK_V4 = "@odata.nextLink"
ODATA_TYPE = "odata.type"

# Request digest returned by /_api/contextinfo
CONTEXT_INFO_VERBOSE_KEY = "GetContextWebInformation"
FORM_DIGEST_VALUE = "FormDigestValue"

# List item type naming
LIST_ITEM_TYPE_PREFIX = "SP.Data."
LIST_ITEM_TYPE_SUFFIX = "ListItem"

# Server-imposed page size bounds
DEFAULT_MAX_ITEMS = 100
MAX_ITEMS_LIMIT = 5000
