from __future__ import annotations

from typing import Iterable, List, Set

from .models import RawItem


def deduplicate(items: Iterable[RawItem]) -> List[RawItem]:
    """
    Remove items whose link was already seen (trailing slash and case of the host ignored).
    Keeps the first occurrence and preserves original order.
    """
    seen: Set[str] = set()
    out: List[RawItem] = []

    def make_key(it: RawItem) -> str:
        link = it.link.strip().rstrip("/")
        scheme, sep, rest = link.partition("://")
        if not sep:
            return link
        host, slash, path = rest.partition("/")
        return f"{scheme.lower()}://{host.lower()}{slash}{path}"

    for it in items:
        key = make_key(it)
        if key in seen:
            continue
        seen.add(key)
        out.append(it)
    return out
