"""Project generation orchestrator.

Expands a template root into a raylib project tree for a
:class:`~rpcreator.project.models.ProjectConfigSchema`.  Generation runs a
fixed sequence of steps; each step is logged, and the first failing step
stops generation with the files written so far left in place::

    generator = ProjectGenerator(schema)
    result = await generator.generate("./out")
    if not result.success:
        print(result.failed_step, result.error)

Template layout (relative to the template root)::

    project_name.rpc              seed project definition, $(KEY) tokens
    src/                          canned sources, Makefile, platform resources
    projects/scripts/             build scripts
    projects/VS2022/              solution and project files
    projects/VSCode/              .vscode settings and workspace
    .github/workflows/            CI workflows, copied as-is
    README.md  LICENSE  CONVENTIONS.md  .gitignore
"""

from __future__ import annotations

import asyncio
import logging
import shutil
import time
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field

from rpcreator.errors import GenerationError, TemplateMissingError
from rpcreator.project.codec import parse_raw_to_schema, sync_schema_to_raw
from rpcreator.project.fields import FIELD_SPECS
from rpcreator.project.models import BuildSystem, ProjectConfigSchema, SourceTemplate
from rpcreator.scaffolder.substitution import SubstitutionChain, TokenRenderer
from rpcreator.store.keyvalue import KeyValueStore

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"

STEP_NAMES: tuple[str, ...] = (
    "resolve",
    "sources",
    "definition",
    "build_systems",
    "workflows",
    "resources",
    "docs",
    "extras",
)

SEED_FILE = "project_name.rpc"
REQUIRED_DIRS = ("src", "projects")

SCREEN_HEADER = "screens.h"
SCREEN_SOURCES = (
    "screen_logo.c",
    "screen_title.c",
    "screen_options.c",
    "screen_gameplay.c",
    "screen_ending.c",
)
CODE_EXTENSIONS = (".c", ".cpp")

# Placeholders found in the bundled templates.
NAME_TOKEN = "project_name"
SOURCE_LIST_TOKEN = "project_name.c"
EXTRA_ITEMS_TOKEN = "<!--Additional Compile Items-->"
VS_MAIN_ITEM = '<ClCompile Include="..\\..\\..\\src\\project_name.c" />'
COMPILER_PATH_WIN = "C:\\raylib\\w64devkit\\bin"
COMPILER_PATH_POSIX = "C:/raylib/w64devkit/bin"
RAYLIB_SRC_WIN = "C:\\raylib\\raylib\\src"
RAYLIB_SRC_POSIX = "C:/raylib/raylib/src"

# Private markers resolved last so that later pairs never rewrite user file names.
_SOURCES_MARKER = "\x00rpc:sources\x00"
_EXTRA_MARKER = "\x00rpc:extra\x00"

ProgressCallback = Callable[[int, int, str], None]


# ---------------------------------------------------------------------------
# Result model
# ---------------------------------------------------------------------------


class GenerationResult(BaseModel):
    """Outcome of one :meth:`ProjectGenerator.generate` run."""

    success: bool = Field(default=False, description="All steps completed")
    project_root: Optional[Path] = Field(default=None, description="Generated project directory")
    steps_completed: list[str] = Field(default_factory=list, description="Steps that finished")
    failed_step: Optional[str] = Field(default=None, description="Step that failed, if any")
    error: Optional[str] = Field(default=None, description="Failure message")
    files_written: list[Path] = Field(default_factory=list, description="Files created or overwritten")


# ---------------------------------------------------------------------------
# Template validation
# ---------------------------------------------------------------------------


def validate_template_root(template_dir: str | Path) -> Path:
    """Check that *template_dir* holds ``src/``, ``projects/`` and the seed file.

    Raises:
        TemplateMissingError: Listing every missing item.
    """
    root = Path(template_dir)
    missing = [f"{name}/" for name in REQUIRED_DIRS if not (root / name).is_dir()]
    if not (root / SEED_FILE).is_file():
        missing.append(SEED_FILE)
    if missing:
        raise TemplateMissingError(root, missing)
    return root


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------


class ProjectGenerator:
    """Generates a raylib project tree from a schema and a template root."""

    def __init__(
        self,
        schema: ProjectConfigSchema,
        template_dir: str | Path | None = None,
    ) -> None:
        self.schema = schema
        self.template_dir = Path(template_dir) if template_dir is not None else DEFAULT_TEMPLATE_DIR
        self.renderer = TokenRenderer()
        self._root: Optional[Path] = None
        self._step = ""
        self._written: list[Path] = []

    # -- Public API --------------------------------------------------------

    async def generate(
        self,
        output_dir: str | Path,
        on_progress: Optional[ProgressCallback] = None,
    ) -> GenerationResult:
        """Generate the project under ``<output_dir>/<repo name>``.

        Args:
            output_dir: Parent directory of the project folder.
            on_progress: Called as ``on_progress(index, total, step)`` after
                each completed step.

        Returns:
            A :class:`GenerationResult`; failures are reported there rather
            than raised.
        """
        self._written = []
        self._root = None
        result = GenerationResult()

        try:
            await asyncio.to_thread(validate_template_root, self.template_dir)
        except TemplateMissingError as exc:
            logger.error("Generation aborted: %s", exc)
            result.failed_step = "validate"
            result.error = str(exc)
            return result

        steps: list[tuple[str, Callable[[], Awaitable[None]]]] = [
            ("resolve", lambda: self._resolve(Path(output_dir))),
            ("sources", self._copy_sources),
            ("definition", self._emit_definition),
            ("build_systems", self._emit_build_systems),
            ("workflows", self._copy_workflows),
            ("resources", self._emit_resources),
            ("docs", self._emit_docs),
            ("extras", self._copy_extras),
        ]

        started = time.monotonic()
        for index, (name, step) in enumerate(steps, start=1):
            self._step = name
            try:
                await step()
            except GenerationError as exc:
                logger.error("Generation failed at step '%s': %s", name, exc)
                result.failed_step = name
                result.error = str(exc)
                break
            except Exception as exc:
                logger.exception("Generation failed at step '%s'", name)
                result.failed_step = name
                result.error = f"{type(exc).__name__}: {exc}"
                break

            result.steps_completed.append(name)
            logger.debug("Step %d/%d '%s' done", index, len(steps), name)
            if on_progress is not None:
                on_progress(index, len(steps), name)
        else:
            result.success = True
            logger.info(
                "Project '%s' generated at %s in %.2fs",
                self.schema.project.internal_name, self._root, time.monotonic() - started,
            )

        result.project_root = self._root
        result.files_written = list(self._written)
        return result

    # -- Derived values ----------------------------------------------------

    @property
    def name(self) -> str:
        return self.schema.project.output_name

    def source_files(self) -> list[str]:
        """Code file names listed in build files, in order."""
        template = SourceTemplate(self.schema.project.selected_template)
        if template is SourceTemplate.BASIC:
            return [f"{self.name}.c"]
        if template is SourceTemplate.SCREEN_MANAGER:
            return [f"{self.name}.c", *SCREEN_SOURCES]
        return [
            Path(path).name
            for path in self.schema.project.source_file_paths
            if Path(path).suffix.lower() in CODE_EXTENSIONS
        ]

    def token_context(self) -> dict[str, Any]:
        """Values available to ``$(KEY)`` tokens in the seed file."""
        context: dict[str, Any] = {}
        for spec in FIELD_SPECS:
            value = str(spec.read(self.schema))
            context[spec.key] = value
            context[spec.key.lower()] = value
        context[NAME_TOKEN] = self.name
        return context

    # -- Steps -------------------------------------------------------------

    async def _resolve(self, output_dir: Path) -> None:
        if not self.name:
            raise GenerationError(self._step, "Project internal name is empty")
        self._root = output_dir / self.schema.project.resolved_repo_name
        await asyncio.to_thread(self._root.mkdir, parents=True, exist_ok=True)
        logger.info("Output path: %s", self._root)

    async def _copy_sources(self) -> None:
        root = self._project_root()
        await asyncio.to_thread((root / "src" / "external").mkdir, parents=True, exist_ok=True)

        template = SourceTemplate(self.schema.project.selected_template)
        if template is SourceTemplate.BASIC:
            await self._copy("src/project_name.c", f"src/{self.name}.c")
        elif template is SourceTemplate.SCREEN_MANAGER:
            await self._copy("src/raylib_advanced.c", f"src/{self.name}.c")
            for file_name in (SCREEN_HEADER, *SCREEN_SOURCES):
                await self._copy(f"src/{file_name}", f"src/{file_name}")
        else:
            paths = self.schema.project.source_file_paths
            if not paths:
                logger.warning("Custom template selected but no source files were provided")
            names = [Path(raw_path).name for raw_path in paths]
            duplicates = sorted({name for name in names if names.count(name) > 1})
            if duplicates:
                raise GenerationError(
                    self._step, f"Source file names must be unique in src/: {', '.join(duplicates)}"
                )
            for raw_path in paths:
                source = Path(raw_path)
                if not source.is_file():
                    raise GenerationError(self._step, f"Source file not found: {source}")
                await self._copy_external(source, f"src/{source.name}")
        logger.info("Copied project sources (%s)", template.name.lower())

    async def _emit_definition(self) -> None:
        seed = await self._read(SEED_FILE)
        rendered = self.renderer.render_string(seed, self.token_context())
        store = KeyValueStore.loads(rendered, source=SEED_FILE)
        sync_schema_to_raw(self._seeded_schema(store), store)
        await self._write(f"{self.name}.rpc", store.dumps())

    def _seeded_schema(self, seed: KeyValueStore) -> ProjectConfigSchema:
        """Copy of the schema whose empty text fields take the seed's values."""
        seeded = parse_raw_to_schema(seed, base=self.schema).config
        merged = self.schema.model_copy(deep=True)
        for spec in FIELD_SPECS:
            if spec.kind == "text" and not spec.read(merged):
                spec.write(merged, spec.read(seeded))
        return merged

    async def _emit_build_systems(self) -> None:
        build = self.schema.build
        if build.is_requested(BuildSystem.SCRIPT):
            await self._emit_scripts()
        if build.is_requested(BuildSystem.MAKEFILE):
            await self._emit_makefile()
        if build.is_requested(BuildSystem.VS2022):
            await self._emit_vs2022()
        if build.is_requested(BuildSystem.VSCODE):
            await self._emit_vscode()

    async def _emit_scripts(self) -> None:
        chain = SubstitutionChain([
            (NAME_TOKEN, self.name),
            ("ProjectDescription", self.schema.project.description),
            (COMPILER_PATH_WIN, self._compiler_path()),
        ])
        scripts_dir = self.template_dir / "projects" / "scripts"
        if not scripts_dir.is_dir():
            raise GenerationError(self._step, "Template file missing: projects/scripts/")
        for script in sorted(p for p in scripts_dir.iterdir() if p.is_file()):
            await self._render(f"projects/scripts/{script.name}", f"projects/scripts/{script.name}", chain)
        logger.info("Build system ready: Script (projects/scripts)")

    async def _emit_makefile(self) -> None:
        chain = SubstitutionChain([
            (SOURCE_LIST_TOKEN, _SOURCES_MARKER),
            (NAME_TOKEN, self.name),
            (COMPILER_PATH_WIN, self._compiler_path()),
            (RAYLIB_SRC_POSIX, _forward_slashes(self._raylib_src())),
            (_SOURCES_MARKER, " ".join(self.source_files())),
        ])
        await self._render("src/Makefile", "src/Makefile", chain)
        logger.info("Build system ready: Makefile (src/Makefile)")

    async def _emit_vs2022(self) -> None:
        sources = self.source_files()
        # Without code files the main compile item is dropped entirely.
        main_pairs: list[tuple[str, str]] = []
        if not sources:
            logger.warning("No C/C++ code files to reference in the VS2022 project")
            main_pairs.append((VS_MAIN_ITEM, ""))
        main_item = sources[0] if sources else ""
        extra_items = "".join(
            f'<ClCompile Include="..\\..\\..\\src\\{file_name}" />\n    '
            for file_name in sources[1:]
        )

        await self._render(
            "projects/VS2022/raylib/raylib.vcxproj",
            "projects/VS2022/raylib/raylib.vcxproj",
            SubstitutionChain([(RAYLIB_SRC_WIN, self._raylib_src())]),
        )
        await self._render(
            "projects/VS2022/project_name/project_name.vcxproj",
            f"projects/VS2022/{self.name}/{self.name}.vcxproj",
            SubstitutionChain([
                *main_pairs,
                (SOURCE_LIST_TOKEN, _SOURCES_MARKER),
                (EXTRA_ITEMS_TOKEN, _EXTRA_MARKER),
                (NAME_TOKEN, self.name),
                (RAYLIB_SRC_WIN, self._raylib_src()),
                (_SOURCES_MARKER, main_item),
                (_EXTRA_MARKER, extra_items),
            ]),
        )
        await self._render(
            "projects/VS2022/project_name.sln",
            f"projects/VS2022/{self.name}.sln",
            SubstitutionChain([(NAME_TOKEN, self.name)]),
        )
        logger.info("Build system ready: VS2022 (projects/VS2022)")

    async def _emit_vscode(self) -> None:
        compiler = _forward_slashes(self._compiler_path())
        raylib_src = _forward_slashes(self._raylib_src())

        await self._render(
            "projects/VSCode/.vscode/launch.json",
            "projects/VSCode/.vscode/launch.json",
            SubstitutionChain([(NAME_TOKEN, self.name), (COMPILER_PATH_POSIX, compiler)]),
        )
        await self._render(
            "projects/VSCode/.vscode/c_cpp_properties.json",
            "projects/VSCode/.vscode/c_cpp_properties.json",
            SubstitutionChain([(RAYLIB_SRC_POSIX, raylib_src), (COMPILER_PATH_POSIX, compiler)]),
        )
        await self._render(
            "projects/VSCode/.vscode/tasks.json",
            "projects/VSCode/.vscode/tasks.json",
            SubstitutionChain([
                (SOURCE_LIST_TOKEN, _SOURCES_MARKER),
                (NAME_TOKEN, self.name),
                (RAYLIB_SRC_POSIX, raylib_src),
                (COMPILER_PATH_POSIX, compiler),
                (_SOURCES_MARKER, " ".join(self.source_files())),
            ]),
        )
        for relative in (
            "projects/VSCode/.vscode/settings.json",
            "projects/VSCode/main.code-workspace",
            "projects/VSCode/README.md",
        ):
            await self._copy(relative, relative)
        logger.info("Build system ready: VSCode (projects/VSCode)")

    async def _copy_workflows(self) -> None:
        workflows = self.template_dir / ".github" / "workflows"
        if not workflows.is_dir():
            raise GenerationError(self._step, "Template file missing: .github/workflows/")
        for workflow in sorted(p for p in workflows.iterdir() if p.is_file()):
            await self._copy(f".github/workflows/{workflow.name}", f".github/workflows/{workflow.name}")
        logger.info("CI/CD workflows ready (.github/workflows)")

    async def _emit_resources(self) -> None:
        project = self.schema.project
        await self._render(
            "src/project_name.rc",
            f"src/{self.name}.rc",
            SubstitutionChain([
                ("CommercialName", project.commercial_name),
                (NAME_TOKEN, self.name),
                ("ProjectDescription", project.description),
                ("ProjectDev", project.developer_name),
                ("ProjectVersion", project.version),
                ("ProjectYear", str(project.year)),
            ]),
        )
        await self._copy("src/project_name.ico", f"src/{self.name}.ico")
        await self._copy("src/project_name.icns", f"src/{self.name}.icns")

        bundle_chain = SubstitutionChain([
            ("ProductName", project.commercial_name),
            (NAME_TOKEN, self.name),
            ("ProjectDescription", project.description),
            ("ProjectDev", project.developer_name),
            ("project_dev", project.developer_name.lower()),
            ("developer_web", project.developer_url.lower()),
            ("ProjectVersion", project.version),
        ])
        await self._render("src/Info.plist", "src/Info.plist", bundle_chain)
        await self._render("src/minshell.html", "src/minshell.html", bundle_chain)
        logger.info("Platform resources ready (src/)")

    async def _emit_docs(self) -> None:
        project = self.schema.project
        await self._render(
            "README.md",
            "README.md",
            SubstitutionChain([
                ("ProductName", project.commercial_name),
                (NAME_TOKEN, self.name),
                ("ProjectDescription", project.description),
                ("ProjectDev", project.developer_name),
            ]),
        )
        await self._render(
            "LICENSE",
            "LICENSE",
            SubstitutionChain([("ProjectDev", project.developer_name), ("ProjectYear", str(project.year))]),
        )

    async def _copy_extras(self) -> None:
        for relative in ("CONVENTIONS.md", ".gitignore"):
            await self._copy(relative, relative)

    # -- File helpers ------------------------------------------------------

    def _project_root(self) -> Path:
        if self._root is None:
            raise GenerationError(self._step, "Project root has not been resolved")
        return self._root

    def _compiler_path(self) -> str:
        return self.schema.platform.windows.w64devkit_path

    def _raylib_src(self) -> str:
        return self.schema.engine.src_path

    def _template_file(self, relative: str) -> Path:
        path = self.template_dir / relative
        if not path.is_file():
            raise GenerationError(self._step, f"Template file missing: {relative}")
        return path

    async def _read(self, relative: str) -> str:
        path = self._template_file(relative)
        data = await asyncio.to_thread(path.read_bytes)
        return data.decode("utf-8")

    async def _write(self, relative: str, content: str) -> Path:
        target = self._project_root() / relative
        await asyncio.to_thread(_write_file, target, content)
        self._written.append(target)
        return target

    async def _render(self, template: str, relative: str, chain: SubstitutionChain) -> Path:
        content = await self._read(template)
        return await self._write(relative, chain.apply(content))

    async def _copy(self, template: str, relative: str) -> Path:
        return await self._copy_external(self._template_file(template), relative)

    async def _copy_external(self, source: Path, relative: str) -> Path:
        target = self._project_root() / relative
        await asyncio.to_thread(_copy_file, source, target)
        self._written.append(target)
        return target


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _forward_slashes(path: str) -> str:
    return path.replace("\\", "/")


def _write_file(path: Path, content: str) -> None:
    """Synchronous helper: create parent dirs and write content byte-exact."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content.encode("utf-8"))


def _copy_file(source: Path, target: Path) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(source, target)
