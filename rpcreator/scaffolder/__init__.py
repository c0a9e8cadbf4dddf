"""Project scaffolder -- expands a template root into a raylib project tree.

Quick usage::

    from rpcreator.project import default_schema
    from rpcreator.scaffolder import ProjectGenerator

    generator = ProjectGenerator(default_schema())
    result = await generator.generate("./out")
"""

from rpcreator.scaffolder.generator import (
    DEFAULT_TEMPLATE_DIR,
    STEP_NAMES,
    GenerationResult,
    ProjectGenerator,
    validate_template_root,
)
from rpcreator.scaffolder.substitution import SubstitutionChain, TokenRenderer

__all__ = [
    "DEFAULT_TEMPLATE_DIR",
    "STEP_NAMES",
    "GenerationResult",
    "ProjectGenerator",
    "SubstitutionChain",
    "TokenRenderer",
    "validate_template_root",
]
