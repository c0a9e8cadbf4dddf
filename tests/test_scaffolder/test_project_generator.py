"""Tests for the project generator.

Covers:
- Source templates (basic, screen manager, custom)
- Build-system selection and placeholder substitution
- The generated ``.rpc`` definition
- Failure reporting per step
"""

from __future__ import annotations

import json
import shutil
from pathlib import Path

import pytest

from rpcreator.project.codec import parse_raw_to_schema
from rpcreator.project.models import BuildSystem, ProjectConfigSchema, SourceTemplate
from rpcreator.scaffolder.generator import (
    DEFAULT_TEMPLATE_DIR,
    SCREEN_SOURCES,
    STEP_NAMES,
    ProjectGenerator,
    validate_template_root,
)
from rpcreator.errors import TemplateMissingError
from rpcreator.store.keyvalue import KeyValueStore

pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _request(schema: ProjectConfigSchema, *systems: BuildSystem) -> None:
    for system in BuildSystem:
        schema.build.set_requested(system, system in systems)


def _custom_sources(tmp_path: Path, *names: str) -> list[str]:
    source_dir = tmp_path / "user_src"
    source_dir.mkdir(exist_ok=True)
    paths = []
    for name in names:
        path = source_dir / name
        path.write_text(f"// {name}\n", encoding="utf-8")
        paths.append(str(path))
    return paths


def _read(path: Path) -> str:
    return path.read_text(encoding="utf-8")


# ---------------------------------------------------------------------------
# Template validation
# ---------------------------------------------------------------------------


class TestValidateTemplateRoot:
    def test_bundled_template_is_valid(self):
        assert validate_template_root(DEFAULT_TEMPLATE_DIR) == DEFAULT_TEMPLATE_DIR

    def test_lists_every_missing_item(self, tmp_path: Path):
        with pytest.raises(TemplateMissingError) as exc_info:
            validate_template_root(tmp_path)
        assert exc_info.value.missing == ["src/", "projects/", "project_name.rpc"]


# ---------------------------------------------------------------------------
# Source templates
# ---------------------------------------------------------------------------


class TestSourceTemplates:
    async def test_basic_with_makefile_and_vs2022(
        self, sample_schema: ProjectConfigSchema, output_dir: Path
    ):
        _request(sample_schema, BuildSystem.MAKEFILE, BuildSystem.VS2022)
        assert sample_schema.build.requested_build_systems == [False, True, False, True]

        result = await ProjectGenerator(sample_schema).generate(output_dir)

        assert result.success, result.error
        root = output_dir / "cool_project"
        assert result.project_root == root
        assert (root / "src" / "cool_project.c").read_bytes() == (
            DEFAULT_TEMPLATE_DIR / "src" / "project_name.c"
        ).read_bytes()
        assert (root / "src" / "external").is_dir()
        assert "PROJECT_SOURCE_FILES  ?= cool_project.c" in _read(root / "src" / "Makefile")
        assert (root / "projects" / "VS2022" / "cool_project.sln").is_file()
        assert (root / "projects" / "VS2022" / "cool_project" / "cool_project.vcxproj").is_file()
        assert (root / "projects" / "VS2022" / "raylib" / "raylib.vcxproj").is_file()
        assert not (root / "projects" / "scripts").exists()
        assert not (root / "projects" / "VSCode").exists()
        assert (root / "cool_project.rpc").is_file()

    async def test_screen_manager(self, sample_schema: ProjectConfigSchema, output_dir: Path):
        sample_schema.project.selected_template = SourceTemplate.SCREEN_MANAGER
        result = await ProjectGenerator(sample_schema).generate(output_dir)

        assert result.success, result.error
        src = output_dir / "cool_project" / "src"
        assert (src / "cool_project.c").read_bytes() == (
            DEFAULT_TEMPLATE_DIR / "src" / "raylib_advanced.c"
        ).read_bytes()
        assert (src / "screens.h").is_file()
        for name in SCREEN_SOURCES:
            assert (src / name).is_file()
        expected = "cool_project.c " + " ".join(SCREEN_SOURCES)
        assert f"PROJECT_SOURCE_FILES  ?= {expected}" in _read(src / "Makefile")

    async def test_custom_sources(
        self, sample_schema: ProjectConfigSchema, output_dir: Path, tmp_path: Path
    ):
        sample_schema.project.selected_template = SourceTemplate.CUSTOM
        sample_schema.project.source_file_paths = _custom_sources(tmp_path, "a.c", "b.c", "b.h")

        result = await ProjectGenerator(sample_schema).generate(output_dir)

        assert result.success, result.error
        root = output_dir / "cool_project"
        for name in ("a.c", "b.c", "b.h"):
            assert _read(root / "src" / name) == f"// {name}\n"
        assert not (root / "src" / "cool_project.c").exists()
        assert "PROJECT_SOURCE_FILES  ?= a.c b.c\n" in _read(root / "src" / "Makefile")

        vcxproj = _read(root / "projects" / "VS2022" / "cool_project" / "cool_project.vcxproj")
        assert '<ClCompile Include="..\\..\\..\\src\\a.c" />' in vcxproj
        assert '<ClCompile Include="..\\..\\..\\src\\b.c" />' in vcxproj
        assert "src\\b.h" not in vcxproj
        assert "<!--Additional Compile Items-->" not in vcxproj

    async def test_custom_file_names_are_not_renamed(
        self, sample_schema: ProjectConfigSchema, output_dir: Path, tmp_path: Path
    ):
        sample_schema.project.internal_name = "mygame"
        sample_schema.project.selected_template = SourceTemplate.CUSTOM
        sample_schema.project.source_file_paths = _custom_sources(
            tmp_path, "project_name_utils.c", "main.c"
        )

        result = await ProjectGenerator(sample_schema).generate(output_dir)

        assert result.success, result.error
        root = output_dir / "mygame"
        makefile = _read(root / "src" / "Makefile")
        assert "PROJECT_NAME          ?= mygame" in makefile
        assert "PROJECT_SOURCE_FILES  ?= project_name_utils.c main.c" in makefile
        tasks = _read(root / "projects" / "VSCode" / ".vscode" / "tasks.json")
        assert "PROJECT_SOURCE_FILES=project_name_utils.c main.c" in tasks
        assert (root / "src" / "project_name_utils.c").is_file()

    async def test_missing_custom_source_fails_sources_step(
        self, sample_schema: ProjectConfigSchema, output_dir: Path, tmp_path: Path
    ):
        sample_schema.project.selected_template = SourceTemplate.CUSTOM
        sample_schema.project.source_file_paths = [str(tmp_path / "ghost.c")]

        result = await ProjectGenerator(sample_schema).generate(output_dir)

        assert not result.success
        assert result.failed_step == "sources"
        assert result.steps_completed == ["resolve"]
        assert "ghost.c" in result.error

    async def test_same_file_name_from_two_directories_fails(
        self, sample_schema: ProjectConfigSchema, output_dir: Path, tmp_path: Path
    ):
        paths = []
        for folder, body in (("a", "// A\n"), ("b", "// B\n")):
            path = tmp_path / folder / "main.c"
            path.parent.mkdir()
            path.write_text(body, encoding="utf-8")
            paths.append(str(path))
        sample_schema.project.selected_template = SourceTemplate.CUSTOM
        sample_schema.project.source_file_paths = paths

        result = await ProjectGenerator(sample_schema).generate(output_dir)

        assert result.failed_step == "sources"
        assert "main.c" in result.error
        assert not (output_dir / "cool_project" / "src" / "main.c").exists()

    async def test_headers_only_leave_no_empty_compile_item(
        self, sample_schema: ProjectConfigSchema, output_dir: Path, tmp_path: Path
    ):
        _request(sample_schema, BuildSystem.VS2022)
        sample_schema.project.selected_template = SourceTemplate.CUSTOM
        sample_schema.project.source_file_paths = _custom_sources(tmp_path, "game.h", "util.hpp")

        result = await ProjectGenerator(sample_schema).generate(output_dir)

        assert result.success, result.error
        vcxproj = _read(
            output_dir / "cool_project" / "projects" / "VS2022" / "cool_project" / "cool_project.vcxproj"
        )
        assert "<ClCompile Include=" not in vcxproj
        assert "src\\\"" not in vcxproj

    async def test_custom_without_sources_still_generates(
        self, sample_schema: ProjectConfigSchema, output_dir: Path
    ):
        sample_schema.project.selected_template = SourceTemplate.CUSTOM
        result = await ProjectGenerator(sample_schema).generate(output_dir)
        assert result.success, result.error


# ---------------------------------------------------------------------------
# Generated files
# ---------------------------------------------------------------------------


class TestGeneratedFiles:
    async def test_definition_file(self, sample_schema: ProjectConfigSchema, output_dir: Path):
        result = await ProjectGenerator(sample_schema).generate(output_dir)
        assert result.success, result.error

        path = output_dir / "cool_project" / "cool_project.rpc"
        text = _read(path)
        assert "$(" not in text

        store = KeyValueStore.load(path)
        assert store.warnings == []
        assert store.comments[1] == "raylib project configuration: Cool Project"
        assert store.get_text("PROJECT_INTERNAL_NAME") == "cool_project"
        assert store.get_value("PROJECT_YEAR") == 2025
        assert store.get_text("PROJECT_ICON_FILE") == "src/cool_project.ico"
        assert store.get_text("PROJECT_SOURCE_PATH") == "src"
        assert store.get_text("PLATFORM_HTML5_SHELL_FILE") == "src/minshell.html"
        assert "DEPLOY_FLAG_ZIP_PACKAGE" in store

        parsed = parse_raw_to_schema(store)
        assert parsed.warnings == []
        assert parsed.config.project.commercial_name == "Cool Project"

    async def test_definition_prefers_schema_values(
        self, sample_schema: ProjectConfigSchema, output_dir: Path
    ):
        sample_schema.project.icon_file = "art/icon.ico"
        await ProjectGenerator(sample_schema).generate(output_dir)
        store = KeyValueStore.load(output_dir / "cool_project" / "cool_project.rpc")
        assert store.get_text("PROJECT_ICON_FILE") == "art/icon.ico"

    async def test_generation_does_not_mutate_schema(
        self, sample_schema: ProjectConfigSchema, output_dir: Path
    ):
        before = sample_schema.model_copy(deep=True)
        await ProjectGenerator(sample_schema).generate(output_dir)
        assert sample_schema == before

    async def test_resources(self, sample_schema: ProjectConfigSchema, output_dir: Path):
        await ProjectGenerator(sample_schema).generate(output_dir)
        src = output_dir / "cool_project" / "src"

        rc = _read(src / "cool_project.rc")
        assert 'VALUE "ProductName", "Cool Project"' in rc
        assert 'VALUE "LegalCopyright", "(c) 2025 raylibtech"' in rc
        assert 'ICON "cool_project.ico"' in rc
        assert (src / "cool_project.ico").read_bytes() == (
            DEFAULT_TEMPLATE_DIR / "src" / "project_name.ico"
        ).read_bytes()
        assert (src / "cool_project.icns").is_file()

        plist = _read(src / "Info.plist")
        assert "com.raylibtech.cool_project" in plist
        assert "raylibtech - www.raylibtech.com" in plist
        assert "ProductName" not in plist
        assert "my cool new project" in _read(src / "minshell.html")

    async def test_docs(self, sample_schema: ProjectConfigSchema, output_dir: Path):
        await ProjectGenerator(sample_schema).generate(output_dir)
        root = output_dir / "cool_project"

        readme = _read(root / "README.md")
        assert readme.startswith("# Cool Project")
        assert "projects/VS2022/cool_project.sln" in readme
        assert _read(root / "LICENSE").startswith("Copyright (c) 2025 raylibtech")

    async def test_workflows_and_extras_copied_verbatim(
        self, sample_schema: ProjectConfigSchema, output_dir: Path
    ):
        await ProjectGenerator(sample_schema).generate(output_dir)
        root = output_dir / "cool_project"

        workflows = sorted((DEFAULT_TEMPLATE_DIR / ".github" / "workflows").glob("*.yml"))
        assert workflows
        for workflow in workflows:
            copied = root / ".github" / "workflows" / workflow.name
            assert copied.read_bytes() == workflow.read_bytes()
        for name in ("CONVENTIONS.md", ".gitignore"):
            assert (root / name).read_bytes() == (DEFAULT_TEMPLATE_DIR / name).read_bytes()

    async def test_vscode_paths(self, sample_schema: ProjectConfigSchema, output_dir: Path):
        sample_schema.engine.src_path = "D:\\dev\\raylib\\src"
        sample_schema.platform.windows.w64devkit_path = "D:\\tools\\w64devkit\\bin"

        await ProjectGenerator(sample_schema).generate(output_dir)
        vscode = output_dir / "cool_project" / "projects" / "VSCode" / ".vscode"

        properties = json.loads(_read(vscode / "c_cpp_properties.json"))
        assert "D:/dev/raylib/src/**" in json.dumps(properties)
        assert "D:/tools/w64devkit/bin/gcc.exe" in json.dumps(properties)

        tasks = json.loads(_read(vscode / "tasks.json"))
        args = tasks["tasks"][0]["args"]
        assert "PROJECT_NAME=cool_project" in args
        assert "PROJECT_SOURCE_FILES=cool_project.c" in args
        assert "RAYLIB_SRC_PATH=D:/dev/raylib/src" in args

        launch = _read(vscode / "launch.json")
        json.loads(launch)
        assert "D:/tools/w64devkit/bin/gdb.exe" in launch
        assert "/src/cool_project.exe" in launch

    async def test_makefile_paths(self, sample_schema: ProjectConfigSchema, output_dir: Path):
        sample_schema.engine.src_path = "D:\\dev\\raylib\\src"
        sample_schema.platform.windows.w64devkit_path = "D:\\tools\\w64devkit\\bin"

        await ProjectGenerator(sample_schema).generate(output_dir)
        makefile = _read(output_dir / "cool_project" / "src" / "Makefile")
        assert "RAYLIB_SRC_PATH       ?= D:/dev/raylib/src" in makefile
        assert "COMPILER_PATH         ?= D:\\tools\\w64devkit\\bin" in makefile
        assert "project_name" not in makefile

    async def test_vs2022_paths(self, sample_schema: ProjectConfigSchema, output_dir: Path):
        sample_schema.engine.src_path = "D:\\dev\\raylib\\src"
        await ProjectGenerator(sample_schema).generate(output_dir)
        vs = output_dir / "cool_project" / "projects" / "VS2022"
        assert "D:\\dev\\raylib\\src" in _read(vs / "raylib" / "raylib.vcxproj")
        assert "C:\\raylib\\raylib\\src" not in _read(vs / "cool_project" / "cool_project.vcxproj")

    async def test_scripts(self, sample_schema: ProjectConfigSchema, output_dir: Path):
        await ProjectGenerator(sample_schema).generate(output_dir)
        scripts = output_dir / "cool_project" / "projects" / "scripts"
        assert 'GAME_NAME="cool_project"' in _read(scripts / "build.sh")
        assert "project_name" not in _read(scripts / "build.bat")

    async def test_line_endings_preserved(
        self, sample_schema: ProjectConfigSchema, output_dir: Path, template_root: Path
    ):
        (template_root / "projects" / "scripts" / "build.bat").write_bytes(
            b"@echo off\r\nset NAME=project_name\r\n"
        )
        result = await ProjectGenerator(sample_schema, template_root).generate(output_dir)

        assert result.success, result.error
        generated = output_dir / "cool_project" / "projects" / "scripts" / "build.bat"
        assert generated.read_bytes() == b"@echo off\r\nset NAME=cool_project\r\n"

    async def test_no_build_systems(self, sample_schema: ProjectConfigSchema, output_dir: Path):
        _request(sample_schema)
        result = await ProjectGenerator(sample_schema).generate(output_dir)

        assert result.success, result.error
        root = output_dir / "cool_project"
        assert not (root / "projects").exists()
        assert not (root / "src" / "Makefile").exists()
        assert (root / "src" / "cool_project.c").is_file()
        assert (root / "README.md").is_file()

    async def test_repo_name_sets_folder(self, sample_schema: ProjectConfigSchema, output_dir: Path):
        sample_schema.project.repo_name = "cool-repo"
        result = await ProjectGenerator(sample_schema).generate(output_dir)
        assert result.project_root == output_dir / "cool-repo"
        assert (output_dir / "cool-repo" / "cool_project.rpc").is_file()


# ---------------------------------------------------------------------------
# Run loop
# ---------------------------------------------------------------------------


class TestGenerateLoop:
    async def test_progress_reported_per_step(
        self, sample_schema: ProjectConfigSchema, output_dir: Path
    ):
        calls: list[tuple[int, int, str]] = []
        result = await ProjectGenerator(sample_schema).generate(
            output_dir, on_progress=lambda i, n, step: calls.append((i, n, step))
        )

        assert result.success
        assert result.steps_completed == list(STEP_NAMES)
        assert calls == [(i, len(STEP_NAMES), name) for i, name in enumerate(STEP_NAMES, start=1)]

    async def test_files_written_are_tracked(
        self, sample_schema: ProjectConfigSchema, output_dir: Path
    ):
        result = await ProjectGenerator(sample_schema).generate(output_dir)
        assert result.files_written
        assert all(path.is_file() for path in result.files_written)
        assert output_dir / "cool_project" / "cool_project.rpc" in result.files_written

    async def test_missing_template_root(
        self, sample_schema: ProjectConfigSchema, output_dir: Path, tmp_path: Path
    ):
        result = await ProjectGenerator(sample_schema, tmp_path / "nothing").generate(output_dir)

        assert not result.success
        assert result.failed_step == "validate"
        assert result.project_root is None
        assert not (output_dir / "cool_project").exists()

    async def test_missing_projects_dir_writes_nothing(
        self, sample_schema: ProjectConfigSchema, output_dir: Path, template_root: Path
    ):
        shutil.rmtree(template_root / "projects")
        result = await ProjectGenerator(sample_schema, template_root).generate(output_dir)

        assert result.failed_step == "validate"
        assert result.files_written == []
        assert list(output_dir.iterdir()) == []

    async def test_missing_seed_file(
        self, sample_schema: ProjectConfigSchema, output_dir: Path, template_root: Path
    ):
        (template_root / "project_name.rpc").unlink()
        result = await ProjectGenerator(sample_schema, template_root).generate(output_dir)
        assert result.failed_step == "validate"
        assert "project_name.rpc" in result.error

    async def test_missing_template_file_fails_its_step(
        self, sample_schema: ProjectConfigSchema, output_dir: Path, template_root: Path
    ):
        (template_root / "src" / "Info.plist").unlink()
        result = await ProjectGenerator(sample_schema, template_root).generate(output_dir)

        assert result.failed_step == "resources"
        assert "src/Info.plist" in result.error
        assert result.steps_completed == list(STEP_NAMES[:STEP_NAMES.index("resources")])
        assert (output_dir / "cool_project" / "cool_project.rpc").is_file()

    async def test_empty_internal_name(self, sample_schema: ProjectConfigSchema, output_dir: Path):
        sample_schema.project.internal_name = "   "
        result = await ProjectGenerator(sample_schema).generate(output_dir)
        assert result.failed_step == "resolve"
        assert result.steps_completed == []

    async def test_regenerating_is_idempotent(
        self, sample_schema: ProjectConfigSchema, output_dir: Path
    ):
        generator = ProjectGenerator(sample_schema)
        first = await generator.generate(output_dir)
        snapshot = {path: path.read_bytes() for path in first.files_written}

        second = await generator.generate(output_dir)

        assert second.success
        assert sorted(second.files_written) == sorted(first.files_written)
        assert {path: path.read_bytes() for path in second.files_written} == snapshot
