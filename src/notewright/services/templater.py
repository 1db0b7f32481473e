"""Templater-style pre-processing of template text.

Expressions are written ``<% ... %>`` (statements ``<%* ... *%>``) so
they never collide with the ``{{ name }}`` placeholders templates use
for variables; those pass through untouched. The ``tp`` namespace
offers ``tp.date.now(fmt, offset_days)``, ``tp.date.today``,
``tp.file.title`` and ``tp.file.path``.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Protocol

from jinja2 import StrictUndefined, TemplateError
from jinja2.sandbox import SandboxedEnvironment

from notewright.domain.errors import TemplaterExpansionFailure
from notewright.domain.models import TemplateDocument

DEFAULT_DATE_FORMAT = "%Y-%m-%d"


class TemplaterPort(Protocol):
    def is_available(self) -> bool: ...

    def process_template(self, template: TemplateDocument) -> str: ...

    def process_string(self, content: str) -> str: ...


def build_templater_environment() -> SandboxedEnvironment:
    """Jinja environment with Templater-style `<% %>` delimiters.

    Sandboxed: template files come from the vault and must not reach
    Python internals through attribute access.
    """
    return SandboxedEnvironment(
        variable_start_string="<%",
        variable_end_string="%>",
        block_start_string="<%*",
        block_end_string="*%>",
        comment_start_string="<%#",
        comment_end_string="#%>",
        undefined=StrictUndefined,
        keep_trailing_newline=True,
        autoescape=False,
    )


@dataclass(frozen=True)
class _DateModule:
    clock: datetime
    default_format: str

    def now(self, fmt: str | None = None, offset_days: int = 0) -> str:
        return (self.clock + timedelta(days=offset_days)).strftime(fmt or self.default_format)

    @property
    def today(self) -> str:
        return self.now()


@dataclass(frozen=True)
class _FileModule:
    title: str
    path: str


@dataclass(frozen=True)
class _Tp:
    date: _DateModule
    file: _FileModule


class JinjaTemplater:
    """:class:`TemplaterPort` backed by Jinja2.

    Args:
        date_format: strftime format used by ``tp.date.now()`` without arguments.
        note_title: Title exposed as ``tp.file.title`` (the target note's name).
        clock: Returns the current time; injectable for tests.
    """

    def __init__(
        self,
        *,
        date_format: str = DEFAULT_DATE_FORMAT,
        note_title: str = "",
        note_path: str = "",
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._env = build_templater_environment()
        self._date_format = date_format
        self._note_title = note_title
        self._note_path = note_path
        self._clock = clock or datetime.now

    def is_available(self) -> bool:
        return True

    def process_template(self, template: TemplateDocument) -> str:
        return self.process_string(template.content)

    def process_string(self, content: str) -> str:
        """Render *content*.

        Raises:
            TemplaterExpansionFailure: On any syntax or evaluation error.
        """
        tp = _Tp(
            date=_DateModule(clock=self._clock(), default_format=self._date_format),
            file=_FileModule(title=self._note_title, path=self._note_path),
        )
        try:
            return self._env.from_string(content).render(tp=tp)
        except (TemplateError, TypeError, ValueError) as exc:
            raise TemplaterExpansionFailure(f"Templater processing failed: {exc}") from exc
