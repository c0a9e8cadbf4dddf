"""Typed project configuration and the ``.rpc`` codec."""

from rpcreator.project.codec import (
    ParseResult,
    load_project,
    parse_raw_to_schema,
    save_project,
    schema_to_store,
    sync_schema_to_raw,
)
from rpcreator.project.keys import KeyClass, classify_key
from rpcreator.project.models import (
    BuildSystem,
    Category,
    ConfigEntry,
    EntryType,
    Platform,
    ProjectConfigSchema,
    SourceTemplate,
    default_schema,
)

__all__ = [
    "BuildSystem",
    "Category",
    "ConfigEntry",
    "EntryType",
    "KeyClass",
    "ParseResult",
    "Platform",
    "ProjectConfigSchema",
    "SourceTemplate",
    "classify_key",
    "default_schema",
    "load_project",
    "parse_raw_to_schema",
    "save_project",
    "schema_to_store",
    "sync_schema_to_raw",
]
