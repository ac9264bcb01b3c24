# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""List item entity type naming."""

from __future__ import annotations

import re

from ..common.constants import LIST_ITEM_TYPE_PREFIX, LIST_ITEM_TYPE_SUFFIX

_WORD_START_RE = re.compile(r"\b\w")

# Applied in order: "_" first so the underscores introduced by later
# escapes are never escaped again.
_ESCAPES = (
    ("_", "_x005f_"),
    (" ", "_x0020_"),
    ("&", "_x0026_"),
)


def to_list_item_type_name(list_title: str) -> str:
    """Return the entity type name SharePoint expects for items of ``list_title``.

    ``"project tasks"`` becomes ``"SP.Data.Project_x0020_TasksListItem"``.
    """
    capitalized = _WORD_START_RE.sub(lambda m: m.group(0).upper(), list_title)
    name = f"{LIST_ITEM_TYPE_PREFIX}{capitalized}{LIST_ITEM_TYPE_SUFFIX}"
    for raw, escaped in _ESCAPES:
        name = name.replace(raw, escaped)
    return name
