"""Mapping between flat key/value stores and :class:`ProjectConfigSchema`.

``parse_raw_to_schema`` and ``sync_schema_to_raw`` are inverses for every
field with a known key: syncing a schema into any store and parsing the
store back yields the same field values.  Keys that are not in
:data:`~rpcreator.project.fields.FIELD_SPECS` pass through untouched.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from rpcreator.errors import UnknownCategoryError
from rpcreator.project.fields import FIELD_SPECS, FieldSpec, lookup
from rpcreator.project.models import ConfigEntry, ProjectConfigSchema
from rpcreator.store.keyvalue import MAX_ENTRIES, KeyValueStore

logger = logging.getLogger(__name__)

PROJECT_FILE_HEADER: tuple[Optional[str], ...] = (
    None,
    "raylib project configuration",
    None,
    "This file contains all required data to define a raylib C/C++ project",
    "and allow building it for multiple platforms using [rpb] tool",
    None,
    "Project configuration is organized in several categories, depending on usage requirements",
    "CATEGORIES:",
    "   - PROJECT: Project definition properties, required for project generation",
    "   - BUILD: Project build properties, required for project building, generic for all platforms",
    "   - PLATFORM: Platform-specific properties, required for building for that platform",
    "   - DEPLOY: Deployment properties, required to distribute the generated build",
    "   - IMAGERY: Project imagery properties, required for distribution on some stores and marketing",
    "   - RAYLIB: raylib library properties, for library customization",
    None,
    "This file follows certain conventions to display the information in an easy-configurable",
    "UI manner when loaded through [rpb - raylib project builder] tool",
    "CONVENTIONS:",
    "   - ID containing [_FLAG_]: Value is considered a boolean, it displays as a checkbox",
    "   - ID value not quoted: Value is considered an integer, it displays as a value box",
    "   - ID ends with _FILE or _FILES: Value is a text file path, it displays with a [BROWSE-File] button",
    "   - ID ends with _PATH: Value is a text directory path, it displays with a [BROWSE-Dir] button",
    None,
    "NOTE: The description of each entry is used as tooltip when editing the entry on [rpb]",
    None,
)


class ParseResult(BaseModel):
    """Outcome of reading a store into a schema.

    ``entries`` holds every classified entry (known or not) in store order;
    ``warnings`` lists entries that were skipped or left at their default.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    config: ProjectConfigSchema = Field(description="Parsed project configuration")
    entries: list[ConfigEntry] = Field(default_factory=list, description="Classified entries in store order")
    warnings: list[str] = Field(default_factory=list, description="Skipped or defaulted entries")
    store: Optional[KeyValueStore] = Field(default=None, description="Store the values were read from")


# ---------------------------------------------------------------------------
# Store -> schema
# ---------------------------------------------------------------------------

def parse_raw_to_schema(
    store: KeyValueStore,
    base: Optional[ProjectConfigSchema] = None,
) -> ParseResult:
    """Populate a schema from *store*.

    Starts from a copy of *base* (or a blank schema) so fields without an
    entry keep their prior value.  Never raises for entry content: unknown
    keys are ignored, entries with an unknown category or an unusable value
    are reported in ``warnings``.
    """
    schema = base.model_copy(deep=True) if base is not None else ProjectConfigSchema()
    result = ParseResult(config=schema, store=store)

    for raw in store.entries:
        try:
            entry = ConfigEntry.from_raw(raw.key, raw.value, raw.description)
        except UnknownCategoryError as exc:
            _warn(result, f"{exc}, entry skipped")
            continue
        except ValueError:
            _warn(result, f"Entry '{raw.key}' expects a numeric flag, got {raw.value!r}; skipped")
            continue

        result.entries.append(entry)

        spec = lookup(entry.key)
        if spec is None:
            continue
        try:
            spec.write(result.config, _raw_for(spec, entry))
        except ValueError:
            _warn(result, f"Entry '{entry.key}' has invalid value {entry.text!r}; default kept")

    return result


def _raw_for(spec: FieldSpec, entry: ConfigEntry) -> int | str:
    if spec.kind == "bool":
        return entry.int_value
    if spec.kind == "int":
        return entry.to_raw()
    return entry.text


def _warn(result: ParseResult, message: str) -> None:
    logger.warning(message)
    result.warnings.append(message)


# ---------------------------------------------------------------------------
# Schema -> store
# ---------------------------------------------------------------------------

def _put(store: KeyValueStore, key: str, spec: FieldSpec, value: int | str, description: Optional[str]) -> None:
    if spec.quoted:
        store.set_text_value(key, str(value), description)
    else:
        store.set_value(key, int(value), description)


def sync_schema_to_raw(schema: ProjectConfigSchema, store: KeyValueStore) -> KeyValueStore:
    """Write every known field of *schema* into *store* and return it.

    Known keys already in the store are overwritten in place, keeping their
    position and description.  Known keys missing from the store are then
    appended in table order.  Unknown keys are not touched.

    Raises:
        CapacityExceededError: If appending a missing key overflows the store.
    """
    present: set[str] = set()
    for raw in store.entries:
        spec = lookup(raw.key)
        if spec is None:
            continue
        _put(store, raw.key, spec, spec.read(schema), None)
        present.add(spec.key)

    for spec in FIELD_SPECS:
        if spec.key in present:
            continue
        _put(store, spec.key, spec, spec.read(schema), spec.description)

    return store


def schema_to_store(schema: ProjectConfigSchema) -> KeyValueStore:
    """Build a fresh store with the project file header and every known key."""
    store = KeyValueStore.empty()
    for line in PROJECT_FILE_HEADER:
        store.set_comment_line(line)
    return sync_schema_to_raw(schema, store)


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------

def load_project(
    path: str | Path,
    base: Optional[ProjectConfigSchema] = None,
    max_entries: int = MAX_ENTRIES,
) -> ParseResult:
    """Load a ``.rpc`` file into a schema.

    Entries past *max_entries* are dropped with a warning.

    Raises:
        NotFoundError: If *path* does not exist.
    """
    store = KeyValueStore.load(path, max_entries=max_entries)
    result = parse_raw_to_schema(store, base)
    result.warnings[:0] = store.warnings
    logger.info(
        "Loaded project file %s (%d entries, %d warnings)",
        path, len(store), len(result.warnings),
    )
    return result


def save_project(
    schema: ProjectConfigSchema,
    path: str | Path,
    base: Optional[KeyValueStore] = None,
) -> Path:
    """Save *schema* as a ``.rpc`` file.

    When *base* is given (typically the store a project was loaded from)
    its layout, comments and unknown keys are preserved.
    """
    store = sync_schema_to_raw(schema, base) if base is not None else schema_to_store(schema)
    target = store.save(path)
    logger.info("Saved project file %s (%d entries)", target, len(store))
    return target
