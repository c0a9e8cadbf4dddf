"""raylib project creator.

Scaffolds raylib C/C++ projects from a typed project configuration:

- ``rpcreator.store``      -- line-oriented key/value files (``.rpc``, ``rpc.ini``)
- ``rpcreator.project``    -- typed project schema and the ``.rpc`` codec
- ``rpcreator.scaffolder`` -- template expansion into a project tree
- ``rpcreator.session``    -- session state driven by a UI runtime or the CLI
"""

__version__ = "2.0.0"

TOOL_NAME = "raylib project creator"
TOOL_SHORT_NAME = "rpc"
TOOL_DESCRIPTION = "A simple and easy-to-use raylib projects creator"
