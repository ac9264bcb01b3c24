# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

# HTTP status codes the server uses for throttling and temporary unavailability
TRANSIENT_STATUS_CODES = {429, 502, 503, 504}

# Validation subcodes
VALIDATION_LIST_TITLE_MISSING = "validation_list_title_missing"
VALIDATION_ITEM_ID_INVALID = "validation_item_id_invalid"
VALIDATION_USER_ID_INVALID = "validation_user_id_invalid"
VALIDATION_MAX_ITEMS_OUT_OF_RANGE = "validation_max_items_out_of_range"
VALIDATION_VERBOSITY_UNKNOWN = "validation_verbosity_unknown"
VALIDATION_SITE_URL_MISSING = "validation_site_url_missing"
VALIDATION_FILTER_OPERATOR_UNKNOWN = "validation_filter_operator_unknown"
VALIDATION_BODY_NOT_DICT = "validation_body_not_dict"

# Transport subcodes
TRANSPORT_NETWORK = "transport_network"

# Response shape subcodes
MALFORMED_VERBOSE_ENVELOPE = "malformed_verbose_envelope"
MALFORMED_VALUE_MISSING = "malformed_value_missing"
MALFORMED_NEXT_LINK = "malformed_next_link"

# Token subcodes
TOKEN_DIGEST_MISSING = "token_digest_missing"

# Authentication subcodes
AUTH_TOKEN_ACQUISITION_FAILED = "auth_token_acquisition_failed"


def http_error_subcode(status: int) -> str:
    """Map an HTTP status code to its subcode string (``http_<status>``)."""
    return f"http_{status}"


def is_transient_status(status: int) -> bool:
    """Return True for status codes the server signals as retryable."""
    return status in TRANSIENT_STATUS_CODES
