"""Editing session for one project.

A :class:`Session` owns the project schema being edited, the interface
preferences and the user-facing messages produced along the way.  A UI
runtime or the CLI drives it; nothing here prints.

Example::

    session = Session()
    session.select_template(SourceTemplate.SCREEN_MANAGER)
    session.set_engine_src_path("/opt/raylib/src")
    result = await session.generate()
    for message in session.messages:
        print(message)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional

from pydantic import BaseModel, Field

from rpcreator.config import AppConfig, Config
from rpcreator.errors import NotFoundError
from rpcreator.project.codec import load_project, save_project
from rpcreator.project.models import (
    LIST_SEPARATOR,
    ProjectConfigSchema,
    SourceTemplate,
    default_schema,
)
from rpcreator.scaffolder.generator import (
    SCREEN_HEADER,
    SCREEN_SOURCES,
    GenerationResult,
    ProgressCallback,
    ProjectGenerator,
)
from rpcreator.store.keyvalue import KeyValueStore

logger = logging.getLogger(__name__)

SOURCE_EXTENSIONS = (".c", ".h", ".cpp", ".hpp")
ENGINE_MARKER_FILE = "raylib.h"
COMPILER_MARKER_FILES = ("gcc", "gcc.exe")


class SourceFilesResult(BaseModel):
    """Outcome of :meth:`Session.add_source_files`."""

    added: list[str] = Field(default_factory=list, description="Paths appended to the project")
    rejected: list[str] = Field(
        default_factory=list, description="Paths skipped: unsupported extension, duplicate file name or list separator"
    )
    capacity_reached: bool = Field(default=False, description="The source file cap stopped adding")


class Session:
    """Mutable state of one project creator session."""

    def __init__(self, config: Optional[Config] = None) -> None:
        self.config = config or Config()
        self.schema: ProjectConfigSchema = self._fresh_schema()
        self.app_config = AppConfig()
        self.messages: list[str] = []
        # Store the current project was loaded from; keeps its layout on save.
        self._store: Optional[KeyValueStore] = None

    # -- Project lifecycle -------------------------------------------------

    def new_project(self) -> None:
        """Reset the schema to the defaults of a new project."""
        self.schema = self._fresh_schema()
        self._store = None
        logger.info("New project started")

    def load_project(self, path: str | Path) -> bool:
        """Load a ``.rpc`` file into the session.

        A missing file leaves the current schema untouched and adds a
        message.  Per-entry problems are added to :attr:`messages`.

        Returns:
            ``True`` when the file was loaded.
        """
        try:
            result = load_project(path, base=self._fresh_schema(), max_entries=self.config.max_entries)
        except NotFoundError as exc:
            self._message(f"{exc}; current project kept")
            return False

        self.schema = result.config
        self._store = result.store
        for warning in result.warnings:
            self._message(warning)
        return True

    def save_project(self, path: str | Path | None = None) -> Path:
        """Save the project definition.

        Args:
            path: Destination file; defaults to ``<output_dir>/<name>.rpc``.

        Returns:
            The path written.
        """
        target = Path(path) if path is not None else (
            self.config.output_dir / f"{self.schema.project.output_name}.rpc"
        )
        return save_project(self.schema, target, base=self._store)

    async def generate(
        self,
        output_dir: str | Path | None = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> GenerationResult:
        """Generate the project tree.

        The output parent is *output_dir*, else the project's generation
        path, else :attr:`Config.output_dir`.
        """
        target = output_dir or self.schema.project.generation_out_path or self.config.output_dir
        generator = ProjectGenerator(self.schema, template_dir=self.config.template_dir)
        result = await generator.generate(Path(target), on_progress=on_progress)
        if result.success:
            self._message(f"Project generated at {result.project_root}")
        else:
            self._message(f"Generation failed at step '{result.failed_step}': {result.error}")
        return result

    # -- Project editing ---------------------------------------------------

    def select_template(self, template: SourceTemplate | int) -> SourceTemplate:
        """Switch the starting source template.

        Switching to :attr:`SourceTemplate.CUSTOM` from another template
        starts with an empty source file list.
        """
        selected = SourceTemplate(template)
        previous = SourceTemplate(self.schema.project.selected_template)
        if selected is SourceTemplate.CUSTOM and previous is not SourceTemplate.CUSTOM:
            self.schema.project.source_file_paths = []
        self.schema.project.selected_template = selected
        return selected

    def source_file_names(self) -> list[str]:
        """File names the selected template puts in ``src/``, in order."""
        name = self.schema.project.output_name
        template = SourceTemplate(self.schema.project.selected_template)
        if template is SourceTemplate.BASIC:
            return [f"{name}.c"]
        if template is SourceTemplate.SCREEN_MANAGER:
            return [f"{name}.c", SCREEN_HEADER, *SCREEN_SOURCES]
        return [Path(path).name for path in self.schema.project.source_file_paths]

    def add_source_files(self, paths: Iterable[str | Path]) -> SourceFilesResult:
        """Append custom source files and select the custom template.

        Only C/C++ sources and headers are accepted, and every file name
        must be unique since all of them land in ``src/``.  Files past
        :attr:`Config.max_source_files` are not added; the result and
        :attr:`messages` report it.
        """
        result = SourceFilesResult()
        current = self.schema.project.source_file_paths
        if SourceTemplate(self.schema.project.selected_template) is not SourceTemplate.CUSTOM:
            self.select_template(SourceTemplate.CUSTOM)
            current = self.schema.project.source_file_paths

        names = {Path(existing).name for existing in current}
        for raw_path in paths:
            path = str(raw_path)
            name = Path(path).name
            if (
                Path(path).suffix.lower() not in SOURCE_EXTENSIONS
                or LIST_SEPARATOR in path
                or name in names
            ):
                result.rejected.append(path)
                continue
            if len(current) >= self.config.max_source_files:
                result.capacity_reached = True
                self._message(
                    f"Source file limit of {self.config.max_source_files} reached, "
                    f"'{Path(path).name}' and later files not added"
                )
                break
            current.append(path)
            names.add(name)
            result.added.append(path)

        for path in result.rejected:
            self._message(
                f"File not recognized as source file (use .c, .h, .cpp, .hpp), "
                f"name already in the project or path contains '{LIST_SEPARATOR}': {path}"
            )
        return result

    def set_engine_src_path(self, path: str | Path) -> bool:
        """Store the raylib source path; warns if it has no ``raylib.h``.

        Returns:
            ``True`` when the marker file was found.
        """
        self.schema.engine.src_path = str(path)
        if (Path(path) / ENGINE_MARKER_FILE).is_file():
            return True
        self._message(f"Provided raylib source path does not include {ENGINE_MARKER_FILE}: {path}")
        return False

    def set_compiler_path(self, path: str | Path) -> bool:
        """Store the GCC compiler directory; warns if no ``gcc`` is found.

        Returns:
            ``True`` when a compiler executable was found.
        """
        self.schema.platform.windows.w64devkit_path = str(path)
        if any((Path(path) / name).is_file() for name in COMPILER_MARKER_FILES):
            return True
        self._message(f"Provided compiler path does not include gcc: {path}")
        return False

    # -- Application preferences -------------------------------------------

    def load_app_config(self) -> AppConfig:
        self.app_config = AppConfig.load(self.config.app_config_path)
        return self.app_config

    def save_app_config(self) -> Path:
        return self.app_config.save(self.config.app_config_path)

    # -- Internal helpers --------------------------------------------------

    def _fresh_schema(self) -> ProjectConfigSchema:
        schema = default_schema()
        schema.project.generation_out_path = str(self.config.output_dir)
        return schema

    def _message(self, text: str) -> None:
        logger.warning(text)
        self.messages.append(text)
