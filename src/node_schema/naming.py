"""Type names derived from dotted field selectors."""

from __future__ import annotations

import re

_SEGMENT_SPLIT = re.compile(r"[^A-Za-z0-9_]+")


def upper_first(text: str) -> str:
    return text[:1].upper() + text[1:]


def lower_first(text: str) -> str:
    return text[:1].lower() + text[1:]


def create_type_name(selector: str) -> str:
    """Turn a selector like ``Article.frontmatter.tags`` into ``ArticleFrontmatterTags``.

    Every run of characters that cannot appear in a type name separates
    segments; each segment gets an upper-case first letter.
    """
    segments = [s for s in _SEGMENT_SPLIT.split(selector) if s]
    name = "".join(upper_first(s) for s in segments)
    if not name:
        return "Type"
    if name[0].isdigit():
        name = f"_{name}"
    return name


class TypeNamer:
    """Hands out collision-free type names for one schema build.

    The same selector always gets the same name. When two different selectors
    produce the same base name, the later one gets a numeric suffix, in the
    order they were requested.
    """

    def __init__(self) -> None:
        self._by_selector: dict[str, str] = {}
        self._owners: dict[str, str] = {}

    def type_name(self, selector: str, base: str | None = None) -> str:
        """Return the name for selector.

        base, when given, is used instead of the name derived from selector;
        selector still decides which requests share a name.
        """
        existing = self._by_selector.get(selector)
        if existing is not None:
            return existing

        base = create_type_name(base if base is not None else selector)
        name = base
        counter = 1
        while name in self._owners:
            counter += 1
            name = f"{base}_{counter}"

        self._by_selector[selector] = name
        self._owners[name] = selector
        return name

    def reserve(self, name: str) -> None:
        """Claim name as-is, e.g. for a record type, so generated names avoid it."""
        self._owners.setdefault(name, name)
        self._by_selector.setdefault(name, name)

    def __contains__(self, name: object) -> bool:
        return name in self._owners
