"""
ClassiCore Console Interface
============================

Rich-powered console abstraction giving every ClassiCore command the same
look: a title banner, section rules, severity-coloured messages and tables.

References:
    - Rich library: https://github.com/Textualize/rich
"""

from __future__ import annotations

from typing import Any, Sequence

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.theme import Theme

_CLASSI_THEME = Theme(
    {
        "classi.banner": "bold bright_cyan",
        "classi.section": "bold bright_magenta",
        "classi.success": "bold green",
        "classi.warning": "bold yellow",
        "classi.error": "bold red",
        "classi.info": "bold bright_blue",
        "classi.dim": "dim white",
        "classi.highlight": "bold bright_white",
        "classi.critical": "bold white on red",
        "classi.high": "bold red",
        "classi.medium": "bold yellow",
        "classi.low": "bold bright_cyan",
        "classi.informational": "bold bright_blue",
    }
)

_SEVERITY_STYLES: dict[str, str] = {
    "CRITICAL": "classi.critical",
    "HIGH": "classi.high",
    "MEDIUM": "classi.medium",
    "LOW": "classi.low",
    "INFO": "classi.informational",
}

_TAGLINE = "Classical Cipher Lab & Cryptanalysis Toolkit"


class ClassiConsole:
    """Unified console interface for the ClassiCore CLI.

    Usage::

        con = ClassiConsole()
        con.banner()
        con.section("Vigenere Analysis")
        con.success("Decoded 42 letters")
    """

    def __init__(self, *, quiet: bool = False, record: bool = False) -> None:
        """Initialise the console.

        Args:
            quiet:  Suppress all output (library / test mode).
            record: Enable Rich recording so output can be exported as text.
        """
        self._console = Console(
            theme=_CLASSI_THEME,
            quiet=quiet,
            record=record,
            highlight=False,
        )

    @property
    def rich(self) -> Console:
        """Direct access to the underlying Rich Console instance."""
        return self._console

    def banner(self, version: str = "1.0.0") -> None:
        """Display the ClassiCore title panel."""
        body = (
            "[classi.banner]C L A S S I C O R E[/classi.banner]\n"
            f"[classi.highlight]{_TAGLINE}[/classi.highlight]\n"
            f"[classi.dim]Version: {version}[/classi.dim]"
        )
        self._console.print(
            Panel(
                Align.center(Text.from_markup(body)),
                border_style="bright_cyan",
                padding=(1, 2),
            )
        )

    def section(self, title: str) -> None:
        """Print a section header rule."""
        self._console.rule(f"  {title}  ", style="classi.section", characters="─")
        self._console.print()

    # ------------------------------------------------------------------ #
    #  Message helpers (severity-coloured)
    # ------------------------------------------------------------------ #

    def success(self, message: str) -> None:
        self._console.print(
            f"[classi.success][✔] SUCCESS:[/classi.success] {message}"
        )

    def warning(self, message: str) -> None:
        self._console.print(
            f"[classi.warning][⚠] WARNING:[/classi.warning] {message}"
        )

    def error(self, message: str) -> None:
        self._console.print(
            f"[classi.error][✘] ERROR:[/classi.error] {message}"
        )

    def info(self, message: str) -> None:
        self._console.print(
            f"[classi.info][ℹ] INFO:[/classi.info] {message}"
        )

    # ------------------------------------------------------------------ #
    #  Tables
    # ------------------------------------------------------------------ #

    def table(
        self,
        title: str,
        columns: Sequence[str],
        rows: Sequence[Sequence[Any]],
        *,
        caption: str | None = None,
        styles: Sequence[str] | None = None,
        show_lines: bool = False,
    ) -> None:
        """Render a styled Rich table.

        Args:
            title:      Table title.
            columns:    Column header labels.
            rows:       Row tuples; each cell is stringified.
            caption:    Optional footer caption.
            styles:     Optional per-column Rich style strings.
            show_lines: Draw separators between rows.
        """
        tbl = Table(
            title=title,
            caption=caption,
            border_style="bright_cyan",
            header_style="bold bright_magenta",
            show_lines=show_lines,
            padding=(0, 1),
        )
        for idx, col_name in enumerate(columns):
            style = styles[idx] if styles and idx < len(styles) else ""
            tbl.add_column(col_name, style=style)

        for row in rows:
            tbl.add_row(*(str(cell) for cell in row))

        self._console.print(tbl)

    def findings_table(self, findings: Sequence[Any], title: str = "Warnings") -> None:
        """Render advisory findings with severity colouring.

        Expects objects with ``severity``, ``title`` and ``description``
        attributes (:class:`shared.models.Finding`).
        """
        tbl = Table(
            title=title,
            border_style="bright_cyan",
            header_style="bold bright_magenta",
            show_lines=True,
            padding=(0, 1),
        )
        tbl.add_column("#", style="dim", width=4, justify="right")
        tbl.add_column("Severity", width=10)
        tbl.add_column("Title")
        tbl.add_column("Description", ratio=2)

        for idx, finding in enumerate(findings, start=1):
            sev = getattr(finding, "severity", "INFO")
            sev_name = sev.value if hasattr(sev, "value") else str(sev).upper()
            sev_style = _SEVERITY_STYLES.get(sev_name, "")
            sev_cell = f"[{sev_style}]{sev_name}[/{sev_style}]" if sev_style else sev_name
            tbl.add_row(
                str(idx),
                sev_cell,
                str(getattr(finding, "title", "")),
                str(getattr(finding, "description", "")),
            )

        self._console.print(tbl)

    # ------------------------------------------------------------------ #
    #  Utility
    # ------------------------------------------------------------------ #

    def print(self, *args: Any, **kwargs: Any) -> None:
        """Proxy to :meth:`rich.console.Console.print`."""
        self._console.print(*args, **kwargs)

    def print_json(self, data: str) -> None:
        """Pretty-print a JSON document."""
        self._console.print_json(data)

    def blank(self, count: int = 1) -> None:
        for _ in range(count):
            self._console.print()

    def export_text(self) -> str:
        """Export recorded console output as plain text (requires ``record=True``)."""
        return self._console.export_text()
