"""BBCode tag tables

This module defines the static data the converter dispatches on: tag aliases,
the tag families with their placement rules, and the reserved HTML characters.
Everything here is read-only and built once at import time.

Usage:
    from bbhtml.constants import TAG_ALIASES, SIMPLE_TAGS
"""

import string
from types import MappingProxyType

# Markup name on the left is rendered as the element on the right.
TAG_ALIASES = MappingProxyType(
    {
        "url": "a",
        "code": "pre",
        "quote": "blockquote",
        "*": "li",
    }
)

# Always legal to open; no placement rules
SIMPLE_TAGS = frozenset(
    {
        "b",
        "i",
        "u",
        "s",
        "sup",
        "sub",
        "blockquote",
        "ol",
        "ul",
        "table",
    }
)

LIST_TAGS = ("ol", "ul")
LIST_ITEM_TAG = "li"
TABLE_TAG = "table"
ROW_TAG = "tr"
CELL_TAGS = frozenset({"td", "th"})
PREFORMATTED_TAGS = frozenset({"pre"})

# Tags reserved for a future argument grammar.
# [tag=value]
ARGUMENT_TAGS = frozenset({"a", "color", "size"})
# [tag opt opt ...]
OPTION_TAGS = frozenset({"font", "img"})
# [tag] with no argument at all
BARE_ARGUMENT_TAGS = frozenset({"a", "img"})

HTML_ESCAPES = MappingProxyType(
    {
        "<": "&lt;",
        ">": "&gt;",
        "&": "&amp;",
    }
)

TAG_NAME_CHARS = frozenset(string.ascii_letters)
TAG_NAME_START_CHARS = TAG_NAME_CHARS | {"*"}
END_TAG_NAME_CHARS = TAG_NAME_START_CHARS

# Characters that end a run of plain text in the default mode
DATA_SPECIAL_CHARS = "[<>&"
