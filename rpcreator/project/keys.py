"""Classification of ``.rpc`` keys into category, platform and value type.

Keys are upper-case and underscore-delimited.  The first segment names the
category, the second names the platform for ``PLATFORM_*`` keys, and the
naming convention of the remainder gives the value type::

    PLATFORM_ANDROID_SDK_PATH   -> (PLATFORM, ANDROID, TEXT_PATH)
    BUILD_FLAG_ASSETS_PACKAGING -> (BUILD, ANY, BOOL)
"""

from __future__ import annotations

from functools import lru_cache
from typing import NamedTuple

from rpcreator.errors import UnknownCategoryError
from rpcreator.project.models import Category, EntryType, Platform

CATEGORY_PREFIXES: dict[str, Category] = {
    "PROJECT": Category.PROJECT,
    "BUILD": Category.BUILD,
    "PLATFORM": Category.PLATFORM,
    "DEPLOY": Category.DEPLOY,
    "IMAGERY": Category.IMAGERY,
    "RAYLIB": Category.ENGINE,
}

PLATFORM_PREFIXES: dict[str, Platform] = {
    "WINDOWS": Platform.WINDOWS,
    "LINUX": Platform.LINUX,
    "MACOS": Platform.MACOS,
    "HTML5": Platform.HTML5,
    "ANDROID": Platform.ANDROID,
    "DRM": Platform.DRM,
    "SWITCH": Platform.SWITCH,
    "DREAMCAST": Platform.DREAMCAST,
    "FREEBSD": Platform.FREEBSD,
}

# Checked in order; the first match wins.
_TYPE_RULES: tuple[tuple[str, str, EntryType], ...] = (
    ("contains", "_FLAG", EntryType.BOOL),
    ("endswith", "_FILES", EntryType.TEXT_FILE),
    ("endswith", "_FILE", EntryType.TEXT_FILE),
    ("endswith", "_PATH", EntryType.TEXT_PATH),
)


class KeyClass(NamedTuple):
    category: Category
    platform: Platform
    type: EntryType


def category_of(key: str) -> Category:
    """Return the category named by the first segment of *key*.

    Raises:
        UnknownCategoryError: If the segment is not a known category.
    """
    prefix = key.split("_", 1)[0]
    try:
        return CATEGORY_PREFIXES[prefix]
    except KeyError:
        raise UnknownCategoryError(key) from None


def platform_of(key: str, category: Category) -> Platform:
    """Return the platform segment of a ``PLATFORM_*`` key, ``ANY`` otherwise."""
    if category is not Category.PLATFORM:
        return Platform.ANY
    parts = key.split("_", 2)
    if len(parts) < 2:
        return Platform.ANY
    return PLATFORM_PREFIXES.get(parts[1], Platform.ANY)


def type_of(key: str, quoted: bool) -> EntryType:
    """Return the value type implied by the key's naming and quoting."""
    for rule, token, entry_type in _TYPE_RULES:
        if rule == "contains" and token in key:
            return entry_type
        if rule == "endswith" and key.endswith(token):
            return entry_type
    return EntryType.TEXT if quoted else EntryType.INT_VALUE


@lru_cache(maxsize=1024)
def classify_key(key: str, quoted: bool) -> KeyClass:
    """Classify *key*; a pure function of its arguments.

    Raises:
        UnknownCategoryError: If the key has no known category prefix.
    """
    category = category_of(key)
    return KeyClass(
        category=category,
        platform=platform_of(key, category),
        type=type_of(key, quoted),
    )
