"""Placeholder substitution for project templates.

Two token families are used by the bundled templates:

- bare identifiers such as ``project_name`` or ``ProjectDescription``,
  replaced literally by a :class:`SubstitutionChain`;
- ``$(KEY)`` tokens, used by the seed ``project_name.rpc`` and rendered by
  :class:`TokenRenderer` (a Jinja2 environment with ``$(`` / ``)``
  delimiters).
"""

from __future__ import annotations

import functools
from collections.abc import Iterable, Iterator
from typing import Any

from jinja2 import Environment, Undefined


# ---------------------------------------------------------------------------
# SubstitutionChain
# ---------------------------------------------------------------------------


class SubstitutionChain:
    """Ordered ``(placeholder, replacement)`` pairs applied as a single fold.

    Every pair replaces all occurrences, literally and case-sensitively,
    in the output of the previous pair.  A placeholder that is absent from
    the text is a no-op, so order matters only where one pair's replacement
    contains a later pair's placeholder.
    """

    def __init__(self, pairs: Iterable[tuple[str, str]] = ()) -> None:
        self._pairs: list[tuple[str, str]] = []
        for placeholder, replacement in pairs:
            self.then(placeholder, replacement)

    def then(self, placeholder: str, replacement: str) -> "SubstitutionChain":
        """Append a pair and return the chain for fluent building."""
        if not placeholder:
            raise ValueError("Placeholder must not be empty")
        self._pairs.append((placeholder, replacement))
        return self

    def apply(self, text: str) -> str:
        return functools.reduce(
            lambda acc, pair: acc.replace(pair[0], pair[1]), self._pairs, text
        )

    __call__ = apply

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(self._pairs)

    def __len__(self) -> int:
        return len(self._pairs)

    def __repr__(self) -> str:
        return f"SubstitutionChain({self._pairs!r})"


# ---------------------------------------------------------------------------
# $(token) rendering
# ---------------------------------------------------------------------------


class _KeepUndefined(Undefined):
    """Renders an unknown ``$(name)`` token back unchanged."""

    def __str__(self) -> str:
        return f"$({self._undefined_name})"


class TokenRenderer:
    """Renders ``$(name)`` tokens with a Jinja2 environment.

    Only variable substitution is enabled; block and comment delimiters are
    set to sequences that never occur in project files so that ``{%`` or
    ``{#`` in template text is left alone.
    """

    def __init__(self) -> None:
        self.env = Environment(
            variable_start_string="$(",
            variable_end_string=")",
            block_start_string="<%rpc",
            block_end_string="rpc%>",
            comment_start_string="<#rpc",
            comment_end_string="rpc#>",
            undefined=_KeepUndefined,
            autoescape=False,
            keep_trailing_newline=True,
        )

    def render_string(self, template_string: str, context: dict[str, Any]) -> str:
        template = self.env.from_string(template_string)
        return template.render(**context)
