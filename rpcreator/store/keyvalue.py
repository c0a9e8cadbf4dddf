"""Line-oriented key/value configuration files.

Reads and writes the plain-text format shared by project definition files
(``.rpc``) and the application init file (``rpc.ini``)::

    # Comment line
    #
    PROJECT_INTERNAL_NAME           "cool_project"          # Project internal name
    PLATFORM_HTML5_HEAP_MEMORY_SIZE 128                     # Heap memory size in MB

A value wrapped in double quotes is text, a bare integer is a number.  The
store keeps entries in insertion order and never reorders them, so a
load -> edit -> save cycle only changes the lines that were edited.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from pathlib import Path

from pydantic import BaseModel, Field

from rpcreator.errors import CapacityExceededError, MalformedEntryError, NotFoundError

logger = logging.getLogger(__name__)

COMMENT_PREFIX = "#"
MAX_ENTRIES = 256
DEFAULT_CAPACITY = 32

# Column layout used when writing entries.
KEY_WIDTH = 40
VALUE_WIDTH = 32

_ENTRY_RE = re.compile(
    r'^(?P<key>[A-Za-z_][A-Za-z0-9_.\-]*)(?:\s*=\s*|\s+)'
    r'(?:"(?P<text>.*)"|(?P<int>[+-]?\d+))'
    r'\s*(?:#\s?(?P<desc>[^"]*))?$'
)


# ---------------------------------------------------------------------------
# Entry model
# ---------------------------------------------------------------------------


class StoreEntry(BaseModel):
    """One ``KEY value # description`` line.

    ``value`` holds either an ``int`` (unquoted in the file) or a ``str``
    (quoted in the file), never both.
    """

    key: str
    value: int | str
    description: str = Field(default="")

    @property
    def is_text(self) -> bool:
        """True when the value is written quoted."""
        return isinstance(self.value, str)

    @property
    def text(self) -> str:
        """The value as it would appear between the quotes."""
        return self.value if isinstance(self.value, str) else str(self.value)


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class KeyValueStore:
    """Ordered key/value entries plus free-text comment lines.

    Keys are unique.  The number of entries is capped at ``max_entries``;
    adding a new key past the cap raises :class:`CapacityExceededError`
    while updating an existing key always succeeds.
    """

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        max_entries: int = MAX_ENTRIES,
    ) -> None:
        self.max_entries = max_entries
        self._capacity = max(1, min(capacity, max_entries))
        self._entries: list[StoreEntry] = []
        self._index: dict[str, int] = {}
        self.comments: list[str] = []
        self.warnings: list[str] = []

    # -- Construction ------------------------------------------------------

    @classmethod
    def empty(cls, capacity: int = DEFAULT_CAPACITY) -> "KeyValueStore":
        """Return a store with no entries, pre-sized for *capacity* entries."""
        return cls(capacity=capacity)

    @classmethod
    def load(cls, path: str | Path, max_entries: int = MAX_ENTRIES) -> "KeyValueStore":
        """Load a store from *path*.

        Raises:
            NotFoundError: If the file does not exist.
        """
        file_path = Path(path)
        if not file_path.is_file():
            raise NotFoundError(file_path)
        text = file_path.read_text(encoding="utf-8")
        return cls.loads(text, max_entries=max_entries, source=str(file_path))

    @classmethod
    def loads(
        cls,
        text: str,
        max_entries: int = MAX_ENTRIES,
        source: str = "<memory>",
    ) -> "KeyValueStore":
        """Parse a store from a string.

        Malformed lines and entries past the cap are skipped; each one is
        logged and recorded in :attr:`warnings`.
        """
        store = cls(capacity=DEFAULT_CAPACITY, max_entries=max_entries)

        for line_no, raw_line in enumerate(text.split("\n"), start=1):
            line = raw_line.strip()
            if not line:
                continue
            if line.startswith(COMMENT_PREFIX):
                comment = line[len(COMMENT_PREFIX):]
                store.comments.append(comment[1:] if comment.startswith(" ") else comment)
                continue

            try:
                entry = parse_entry_line(line, line_no)
            except MalformedEntryError as exc:
                store._warn(f"{source}: {exc} (skipped)")
                continue

            if entry.key in store._index:
                store._warn(f"{source}: line {line_no}: duplicate key '{entry.key}' overrides earlier value")
            try:
                store._put(entry.key, entry.value, entry.description)
            except CapacityExceededError:
                store._warn(
                    f"{source}: line {line_no}: entry limit of {max_entries} reached, "
                    f"'{entry.key}' and later entries dropped"
                )
                break

        return store

    # -- Mutation ----------------------------------------------------------

    def set_comment_line(self, text: str | None = None) -> None:
        """Append a comment line; ``None`` appends a bare separator line."""
        if text is None:
            self.comments.append("")
            return
        for part in text.splitlines() or [""]:
            self.comments.append(part.rstrip())

    def set_value(self, key: str, value: int, description: str | None = None) -> None:
        """Insert or update an integer/boolean entry."""
        self._put(key, int(value), description)

    def set_text_value(self, key: str, text: str, description: str | None = None) -> None:
        """Insert or update a text entry.

        Raises:
            CapacityExceededError: If *key* is new and the store is full.
            ValueError: If *text* spans several lines.
        """
        if "\n" in text or "\r" in text:
            raise ValueError(f"Value for '{key}' must be a single line")
        self._put(key, str(text), description)

    # -- Queries -----------------------------------------------------------

    def get(self, key: str) -> StoreEntry | None:
        """Return the entry for *key*, or ``None``."""
        position = self._index.get(key)
        return None if position is None else self._entries[position]

    def get_value(self, key: str) -> int:
        """Return the integer value of *key*; 0 when absent or not numeric."""
        entry = self.get(key)
        if entry is None:
            return 0
        if isinstance(entry.value, int):
            return entry.value
        try:
            return int(entry.value.strip())
        except ValueError:
            return 0

    def get_text(self, key: str, default: str = "") -> str:
        """Return the text form of *key*, or *default* when absent."""
        entry = self.get(key)
        return default if entry is None else entry.text

    @property
    def entries(self) -> tuple[StoreEntry, ...]:
        """Entries in insertion order."""
        return tuple(self._entries)

    @property
    def capacity(self) -> int:
        """Current allocated capacity (grows up to :attr:`max_entries`)."""
        return self._capacity

    def keys(self) -> list[str]:
        return [entry.key for entry in self._entries]

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._index

    def __iter__(self) -> Iterator[StoreEntry]:
        return iter(self._entries)

    # -- Serialisation -----------------------------------------------------

    def dumps(self) -> str:
        """Render comments, a blank line, then entries, one per line."""
        lines = [
            f"{COMMENT_PREFIX} {comment}" if comment else COMMENT_PREFIX
            for comment in self.comments
        ]
        if lines and self._entries:
            lines.append("")
        lines.extend(format_entry_line(entry) for entry in self._entries)
        if not lines:
            return ""
        return "\n".join(lines) + "\n"

    def save(self, path: str | Path) -> Path:
        """Write the store to *path*, creating parent directories.

        Existing files are overwritten.
        """
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.dumps(), encoding="utf-8")
        return target

    # -- Internal helpers --------------------------------------------------

    def _put(self, key: str, value: int | str, description: str | None) -> None:
        position = self._index.get(key)
        if position is not None:
            entry = self._entries[position]
            entry.value = value
            if description is not None:
                entry.description = _clean_description(description)
            return

        if len(self._entries) >= self.max_entries:
            raise CapacityExceededError(key, self.max_entries)
        if len(self._entries) >= self._capacity:
            self._capacity = min(self._capacity + DEFAULT_CAPACITY, self.max_entries)

        self._index[key] = len(self._entries)
        self._entries.append(
            StoreEntry(key=key, value=value, description=_clean_description(description or ""))
        )

    def _warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)


# ---------------------------------------------------------------------------
# Line codec
# ---------------------------------------------------------------------------


def parse_entry_line(line: str, line_no: int = 0) -> StoreEntry:
    """Parse a single non-comment line into a :class:`StoreEntry`.

    Raises:
        MalformedEntryError: If the line is not ``KEY "text"`` or ``KEY int``,
            optionally followed by ``# description``.
    """
    match = _ENTRY_RE.match(line.strip())
    if match is None:
        raise MalformedEntryError(line_no, line)

    value: int | str
    if match.group("text") is not None:
        value = match.group("text")
    else:
        value = int(match.group("int"))

    return StoreEntry(
        key=match.group("key"),
        value=value,
        description=(match.group("desc") or "").strip(),
    )


def format_entry_line(entry: StoreEntry) -> str:
    """Render an entry with aligned value and description columns."""
    value = f'"{entry.value}"' if entry.is_text else str(entry.value)
    line = f"{entry.key.ljust(KEY_WIDTH - 1)} {value}"
    if entry.description:
        line = f"{line.ljust(KEY_WIDTH + VALUE_WIDTH)} {COMMENT_PREFIX} {entry.description}"
    return line


def _clean_description(description: str) -> str:
    return " ".join(description.replace('"', "'").split())
