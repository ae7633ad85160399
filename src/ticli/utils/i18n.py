"""Default message lookup.

The locale catalog is an external collaborator; ticli only needs a
``translate(key, *args)`` callable.  Without a catalog, the key is the
English base string and ``%s`` placeholders are filled positionally.
"""

from __future__ import annotations


def translate(key: str, *args: object) -> str:
    if not args:
        return key
    try:
        return key % args
    except (TypeError, ValueError):
        return " ".join([key, *map(str, args)])
