"""Styled text documents used to render failure messages.

`Output` is a small builder over :class:`rich.text.Text`. Handlers and type
inspectors append to it, nest one document inside another, and the engine
finally renders it as plain text, ANSI or HTML.
"""

from __future__ import annotations

import io

from rich.console import Console
from rich.style import Style
from rich.text import Text


FORMATS = ("text", "ansi", "html")

_HTML_FORMAT = '<pre style="font-family: monospace">{code}</pre>'


class Output:
    """A mutable, clonable document of styled text.

    Every builder method returns the document itself so calls can be chained::

        Output().error("expected").sp().text("42").nl().indent_lines().i().text("nested")

    Parameters
    ----------
    text : rich.text.Text or None
        Initial content; it is copied, never shared.
    indent_width : int
        Number of spaces written by :meth:`i` per indentation level.
    """

    def __init__(self, text: Text | None = None, *, indent_width: int = 2) -> None:
        self._text = text.copy() if text is not None else Text()
        self.indent_width = indent_width
        self.indentation_level = 0

    def text(self, content: object, style: str | Style | None = None) -> Output:
        """Append ``content`` (converted with ``str``) using an optional style."""
        self._text.append(str(content), style=style)
        return self

    def error(self, content: object) -> Output:
        return self.text(content, "red")

    def sp(self, count: int = 1) -> Output:
        return self.text(" " * count)

    def nl(self, count: int = 1) -> Output:
        return self.text("\n" * count)

    def indent_lines(self) -> Output:
        self.indentation_level += 1
        return self

    def outdent_lines(self) -> Output:
        self.indentation_level = max(self.indentation_level - 1, 0)
        return self

    def i(self) -> Output:
        """Write the indentation for the current level."""
        return self.text(" " * (self.indentation_level * self.indent_width))

    def append(self, other: Output) -> Output:
        """Append another document, keeping its styles."""
        self._text.append_text(other._text)
        return self

    def block(self, other: Output) -> Output:
        """Append ``other`` so each of its lines starts at the current column."""
        column = len(self._text.plain.rsplit("\n", 1)[-1])
        for index, line in enumerate(other._text.split("\n", allow_blank=True)):
            if index:
                self._text.append("\n" + " " * column)
            self._text.append_text(line)
        return self

    def clone(self) -> Output:
        clone = Output(self._text, indent_width=self.indent_width)
        clone.indentation_level = self.indentation_level
        return clone

    @property
    def lines(self) -> list[str]:
        return self._text.plain.split("\n")

    @property
    def height(self) -> int:
        return len(self.lines)

    @property
    def is_empty(self) -> bool:
        return not self._text.plain

    def as_rich(self) -> Text:
        return self._text.copy()

    def render(self, fmt: str = "text", *, width: int = 100) -> str:
        """Render the document.

        Parameters
        ----------
        fmt : str
            ``"text"`` for plain text, ``"ansi"`` for terminal escape codes or
            ``"html"`` for a ``<pre>`` block with inline styles.
        width : int
            Console width used for the styled formats.

        Raises
        ------
        ValueError
            If ``fmt`` is not one of :data:`FORMATS`.
        """
        if fmt == "text":
            return self._text.plain
        if fmt not in FORMATS:
            raise ValueError(f"Unknown output format: {fmt!r}")

        console = Console(
            file=io.StringIO(),
            record=True,
            width=width,
            force_terminal=True,
            color_system="truecolor",
        )
        console.print(self._text, end="", soft_wrap=True)
        if fmt == "ansi":
            return console.export_text(styles=True)
        return console.export_html(inline_styles=True, code_format=_HTML_FORMAT)

    def __str__(self) -> str:
        return self._text.plain

    def __repr__(self) -> str:
        return f"Output({self._text.plain!r})"
