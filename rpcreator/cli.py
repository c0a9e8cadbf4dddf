"""Command-line interface for the raylib project creator."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import time
from pathlib import Path
from typing import Optional, Sequence

from rpcreator import TOOL_DESCRIPTION, TOOL_NAME, TOOL_SHORT_NAME, __version__
from rpcreator.config import Config
from rpcreator.project.models import SourceTemplate
from rpcreator.scaffolder.generator import GenerationResult
from rpcreator.session import Session
from rpcreator.utils import (
    configure_logging,
    console,
    create_progress,
    format_duration,
    print_error,
    print_header,
    print_success,
    print_summary_table,
    print_warning,
)

logger = logging.getLogger(__name__)

TEMPLATE_CHOICES: dict[str, SourceTemplate] = {
    "basic": SourceTemplate.BASIC,
    "screens": SourceTemplate.SCREEN_MANAGER,
    "custom": SourceTemplate.CUSTOM,
}

PROJECT_FILE_EXTENSION = ".rpc"


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=TOOL_SHORT_NAME,
        description=f"{TOOL_NAME} v{__version__} -- {TOOL_DESCRIPTION}",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        allow_abbrev=False,
        epilog=(
            "Examples:\n"
            "  rpc -pn cool_game -cn \"Cool Game\" -o ./projects\n"
            "  rpc -i main.c,player.c,player.h --raylib C:\\raylib\\raylib\\src\n"
            "  rpc -rpc cool_game.rpc -o ./out\n"
            "  rpc game.c\n"
        ),
    )

    parser.add_argument(
        "inputs",
        nargs="*",
        help="Source files (.c, .h, .cpp, .hpp) or one .rpc project file",
    )
    parser.add_argument(
        "-i", "--src",
        default=None,
        help="Comma-separated source files; selects the custom template",
    )
    parser.add_argument(
        "-rpc",
        dest="rpc_file",
        default=None,
        help="Load an existing .rpc project file (overrides the project flags)",
    )
    parser.add_argument("-pn", "--project-name", default=None, help="Project internal name")
    parser.add_argument("-rn", "--repo-name", default=None, help="Project repository name")
    parser.add_argument("-cn", "--commercial-name", default=None, help="Project commercial name")
    parser.add_argument("-pv", "--project-version", default=None, help="Project version")
    parser.add_argument("--desc", default=None, help="Project description")
    parser.add_argument("--dev", default=None, help="Developer name")
    parser.add_argument("--devurl", default=None, help="Developer webpage url")
    parser.add_argument("--devmail", default=None, help="Developer email")
    parser.add_argument("--raylib", default=None, help="raylib source path (containing raylib.h)")
    parser.add_argument("--comp", default=None, help="Compiler path (containing gcc)")
    parser.add_argument("-o", "--out", default=None, help="Output directory (default: current directory)")
    parser.add_argument(
        "-t", "--template-dir",
        default=None,
        help="Template root (default: bundled template)",
    )
    parser.add_argument(
        "--template",
        choices=sorted(TEMPLATE_CHOICES),
        default=None,
        help="Starting source template",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


# ---------------------------------------------------------------------------
# Session setup
# ---------------------------------------------------------------------------


def _split_inputs(args: argparse.Namespace) -> tuple[list[str], Optional[str]]:
    """Return ``(source_files, rpc_file)`` from ``-i``, ``-rpc`` and positionals."""
    sources = [part.strip() for part in (args.src or "").split(",") if part.strip()]
    rpc_file = args.rpc_file
    for item in args.inputs:
        if item.lower().endswith(PROJECT_FILE_EXTENSION) and rpc_file is None:
            rpc_file = item
        else:
            sources.append(item)
    return sources, rpc_file


def apply_arguments(session: Session, args: argparse.Namespace) -> None:
    """Apply command-line values to the session schema."""
    project = session.schema.project
    sources, rpc_file = _split_inputs(args)

    if sources:
        result = session.add_source_files(sources)
        # A single dropped code file names the project after itself.
        if len(result.added) == 1 and args.project_name is None:
            stem = Path(result.added[0]).stem
            project.internal_name = stem
            project.commercial_name = stem
            if args.out is None:
                project.generation_out_path = str(Path(result.added[0]).parent)

    if args.template is not None:
        session.select_template(TEMPLATE_CHOICES[args.template])

    if args.project_name is not None:
        project.internal_name = args.project_name
    if args.repo_name is not None:
        project.repo_name = args.repo_name
    if args.commercial_name is not None:
        project.commercial_name = args.commercial_name
    if args.project_version is not None:
        project.version = args.project_version
    if args.desc is not None:
        project.description = args.desc
    if args.dev is not None:
        project.developer_name = args.dev
    if args.devurl is not None:
        project.developer_url = args.devurl
    if args.devmail is not None:
        project.developer_email = args.devmail
    if args.raylib is not None:
        session.set_engine_src_path(args.raylib)
    if args.comp is not None:
        session.set_compiler_path(args.comp)

    if rpc_file is not None and session.load_project(rpc_file) and args.out is not None:
        session.schema.project.generation_out_path = args.out


def _print_result(result: GenerationResult, session: Session, elapsed: float) -> None:
    # The last message is the generation status, reported by main().
    for message in session.messages[:-1]:
        print_warning(message)

    project = session.schema.project
    print_summary_table(
        {
            "Project": project.commercial_name or project.internal_name,
            "Internal name": project.output_name,
            "Template": SourceTemplate(project.selected_template).name.lower(),
            "Output": str(result.project_root or "-"),
            "Steps": f"{len(result.steps_completed)} completed",
            "Files written": str(len(result.files_written)),
            "Duration": format_duration(elapsed),
        },
        title="Project Generation",
    )


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point for ``rpcreator`` / ``python -m rpcreator``.

    Returns:
        0 when the project was generated (or help was shown), 1 otherwise.
    """
    arguments = list(sys.argv[1:] if argv is None else argv)
    parser = build_parser()
    if not arguments:
        parser.print_help()
        return 0

    args = parser.parse_args(arguments)
    configure_logging(args.verbose)

    try:
        config = Config.from_env()
    except ValueError as exc:
        print_error(f"Error: invalid environment configuration: {exc}")
        return 1
    if args.out is not None:
        config.output_dir = Path(args.out)
    if args.template_dir is not None:
        config.template_dir = Path(args.template_dir)

    session = Session(config)
    apply_arguments(session, args)

    print_header(f"{TOOL_NAME} v{__version__}")
    started = time.monotonic()
    with create_progress() as progress:
        task = progress.add_task("Generating project...", total=None)

        def on_progress(index: int, total: int, step: str) -> None:
            progress.update(task, completed=index, total=total, description=f"Step: {step}")

        result = asyncio.run(session.generate(on_progress=on_progress))

    _print_result(result, session, time.monotonic() - started)

    if result.success:
        print_success(f"Project generated successfully at {result.project_root}")
        return 0
    print_error(f"Generation failed at step '{result.failed_step}': {result.error}")
    return 1
