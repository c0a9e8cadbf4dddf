"""Shared pytest fixtures for the rpcreator test suite.

Provides reusable fixtures for:
- A writable copy of the bundled template root
- Output directories
- Sample project schemas and ``.rpc`` text
"""

from __future__ import annotations

import shutil
import textwrap
from pathlib import Path

import pytest

from rpcreator.project.models import ProjectConfigSchema, default_schema
from rpcreator.scaffolder.generator import DEFAULT_TEMPLATE_DIR


# ---------------------------------------------------------------------------
# Paths & Directories
# ---------------------------------------------------------------------------

@pytest.fixture
def template_root(tmp_path: Path) -> Path:
    """Writable copy of the bundled template, safe to break in tests."""
    target = tmp_path / "template"
    shutil.copytree(DEFAULT_TEMPLATE_DIR, target)
    return target


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    """Parent directory for generated projects."""
    out = tmp_path / "out"
    out.mkdir()
    return out


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_schema() -> ProjectConfigSchema:
    """Default schema with fixed, predictable project identity."""
    schema = default_schema()
    schema.project.internal_name = "cool_project"
    schema.project.commercial_name = "Cool Project"
    schema.project.description = "my cool new project"
    schema.project.developer_name = "raylibtech"
    schema.project.developer_url = "www.raylibtech.com"
    schema.project.version = "1.0"
    schema.project.year = 2025
    return schema


@pytest.fixture
def sample_rpc_text() -> str:
    """A small ``.rpc`` file with known, aliased and unknown keys."""
    return textwrap.dedent("""\
        #
        # sample project
        #

        PROJECT_INTERNAL_NAME                   "space_war"                      # Project internal name
        PROJECT_COMMERCIAL_NAME                 "Space War"                      # Project commercial name
        PROJECT_YEAR                            2024
        PLATFORM_HTML5_HEAP_MEMORY_SIZE         256                              # Heap size in MB
        BUILD_FLAG_ASSETS_PACKAGING             1
        DEPLOY_FLAG_INCUDE_README               1                                # Legacy spelling
        PROJECT_CUSTOM_NOTE                     "keep me"                        # Not a known key
        """)
