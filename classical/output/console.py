"""
ClassiCore Console Output
=========================

Rich-based formatters for the cipher lab: transform results, step-by-step
visualization records, cryptanalysis records and the LCG preset table.

Uses the shared ClassiConsole infrastructure for consistent styling.

References:
    - Rich Library Documentation. https://rich.readthedocs.io/
"""

from __future__ import annotations

from typing import Callable, Mapping, Optional

from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from shared.console import ClassiConsole
from classical.core.models import (
    AnalysisRecord,
    CaesarAnalysis,
    ColumnarVisualization,
    DoubleAnalysis,
    DoubleVisualization,
    HillVisualization,
    KeystreamVisualization,
    LCGPreset,
    LCGQualityReport,
    OTPVisualization,
    PlayfairVisualization,
    PolyalphabeticAnalysis,
    PolygraphicAnalysis,
    RailFenceAnalysis,
    RailFenceVisualization,
    SecurityAssessment,
    ShiftVisualization,
    StatisticalAnalysis,
    StreamAnalysis,
    StreamVisualization,
    SuperVisualization,
    TextStatistics,
    TransformResult,
    TranspositionAnalysis,
    VisualizationRecord,
)


# ===================================================================== #
#  Colour Maps
# ===================================================================== #

_GRADE_COLOURS: dict[str, str] = {
    "Excellent": "bold bright_green",
    "Good": "green",
    "Fair": "yellow",
    "Poor": "red",
    "Very Poor": "bold white on red",
}

_RULE_COLOURS: dict[str, str] = {
    "row": "bright_cyan",
    "column": "bright_magenta",
    "rectangle": "yellow",
}


def _table(title: str, *, show_lines: bool = False) -> Table:
    return Table(
        title=title,
        border_style="bright_cyan",
        header_style="bold bright_magenta",
        show_lines=show_lines,
    )


def _score_colour(score: float) -> str:
    if score >= 80:
        return "bold bright_green"
    if score >= 60:
        return "yellow"
    return "bold red"


class ClassiConsoleOutput:
    """Console formatters for cipher results.

    Usage::

        console = ClassiConsole()
        output = ClassiConsoleOutput(console)
        output.display_result(engine.encode("caesar", "HELLO", 3))
        output.display_visualization(engine.visualize("playfair", "HELLO", "MONARCHY"))
        output.display_analysis(engine.analyze("vigenere", ciphertext))
    """

    def __init__(self, console: Optional[ClassiConsole] = None) -> None:
        self.console = console or ClassiConsole()
        self._rich = self.console.rich
        self._visualizers: Mapping[type, Callable[[VisualizationRecord], None]] = {
            ShiftVisualization: self._display_shift,
            KeystreamVisualization: self._display_keystream,
            OTPVisualization: self._display_otp,
            PlayfairVisualization: self._display_playfair,
            HillVisualization: self._display_hill,
            RailFenceVisualization: self._display_rail_fence,
            ColumnarVisualization: self._display_columnar,
            DoubleVisualization: self._display_double,
            SuperVisualization: self._display_super,
            StreamVisualization: self._display_stream,
        }

    # ------------------------------------------------------------------ #
    #  Transform results
    # ------------------------------------------------------------------ #

    def display_result(self, result: TransformResult) -> None:
        label = "Encoded" if result.operation == "encode" else "Decoded"
        self.console.section(f"{result.family.value.replace('_', ' ').title()} {label}")

        body = Text()
        body.append(f"{label}: ", style="bold")
        body.append(result.output, style="bold bright_white")
        body.append(f"\nLength: {len(result.output)}", style="dim")
        body.append(f"\nElapsed: {result.elapsed_seconds * 1000:.2f} ms", style="dim")
        self._rich.print(Panel(body, title="Result", border_style="cyan"))

        if result.warnings:
            self.console.blank()
            self.console.findings_table(result.warnings)

    # ------------------------------------------------------------------ #
    #  Visualization records
    # ------------------------------------------------------------------ #

    def display_visualization(self, record: Optional[VisualizationRecord]) -> None:
        if record is None:
            self.console.warning("Nothing to visualize: the text has no usable characters.")
            return
        self.console.section(
            f"{record.family.value.replace('_', ' ').title()} Visualization"
        )
        summary = Text()
        summary.append("Plaintext:  ", style="bold")
        summary.append(record.plaintext + "\n")
        summary.append("Ciphertext: ", style="bold")
        summary.append(record.ciphertext, style="bold bright_white")
        self._rich.print(Panel(summary, title="Overview", border_style="cyan"))

        renderer = self._visualizers.get(type(record))
        if renderer is not None:
            renderer(record)

    def _display_shift(self, record: ShiftVisualization) -> None:
        tbl = _table(f"Shift {record.shift}")
        tbl.add_column("Alphabet", style="bold")
        for letter in record.plain_alphabet:
            tbl.add_column(letter, justify="center", width=1)
        tbl.add_row("Plain", *record.plain_alphabet)
        tbl.add_row("Cipher", *(f"[bright_cyan]{c}[/bright_cyan]" for c in record.cipher_alphabet))
        self._rich.print(tbl)

    def _display_keystream(self, record: KeystreamVisualization) -> None:
        self._rich.print(f"[bold]Keyword:[/bold] {record.keyword}")
        self._rich.print(f"[bold]Keystream:[/bold] {record.keystream}")
        tbl = _table("Keystream Steps")
        tbl.add_column("#", style="dim", justify="right")
        tbl.add_column("Plain", justify="center")
        tbl.add_column("Key", justify="center")
        tbl.add_column("Cipher", justify="center", style="bold bright_white")
        tbl.add_column("Calculation")
        has_source = any(step.key_source for step in record.steps)
        if has_source:
            tbl.add_column("Key Source", style="dim")
        for step in record.steps:
            row = [
                str(step.position),
                step.plain_char,
                step.key_char,
                step.cipher_char,
                step.calculation,
            ]
            if has_source:
                row.append(step.key_source or "")
            tbl.add_row(*row)
        self._rich.print(tbl)

    def _display_otp(self, record: OTPVisualization) -> None:
        self._display_keystream(record)
        tbl = _table("Encodings", show_lines=True)
        tbl.add_column("", style="bold")
        tbl.add_column("Hex")
        tbl.add_column("Binary")
        tbl.add_row("Plaintext", record.plaintext_hex, record.plaintext_binary)
        tbl.add_row("Key", record.key_hex, record.key_binary)
        tbl.add_row("Ciphertext", record.ciphertext_hex, record.ciphertext_binary)
        self._rich.print(tbl)
        self._display_security(record.security)

    def _display_playfair(self, record: PlayfairVisualization) -> None:
        grid = _table(f"Key Square ({record.keyword})", show_lines=True)
        for _ in range(5):
            grid.add_column(justify="center", width=3)
        for row in record.grid:
            grid.add_row(*row)
        self._rich.print(grid)
        self._rich.print(f"[bold]Prepared:[/bold] {record.prepared_text}")

        tbl = _table("Digraphs")
        tbl.add_column("Plain", justify="center")
        tbl.add_column("Cipher", justify="center", style="bold bright_white")
        tbl.add_column("Rule")
        tbl.add_column("Positions", style="dim")
        for step in record.digraphs:
            colour = _RULE_COLOURS.get(step.rule, "white")
            tbl.add_row(
                step.plain,
                step.cipher,
                f"[{colour}]{step.rule}[/{colour}]",
                " ".join(f"({r},{c})" for r, c in step.positions),
            )
        self._rich.print(tbl)

    def _display_hill(self, record: HillVisualization) -> None:
        matrices = Table.grid(padding=(0, 4))
        matrices.add_column()
        matrices.add_column()
        matrices.add_row(
            self._matrix_table("Key Matrix", record.matrix),
            self._matrix_table("Inverse mod 26", record.inverse_matrix),
        )
        self._rich.print(matrices)
        self._rich.print(
            f"[bold]Determinant:[/bold] {record.determinant}   "
            f"[bold]Padded:[/bold] {record.padded_text}"
        )

        tbl = _table("Blocks")
        tbl.add_column("#", style="dim", justify="right")
        tbl.add_column("Plain")
        tbl.add_column("Vector")
        tbl.add_column("Result")
        tbl.add_column("Cipher", style="bold bright_white")
        for block in record.blocks:
            tbl.add_row(
                str(block.block),
                block.plain_text,
                str(block.plain_vector),
                str(block.cipher_vector),
                block.cipher_text,
            )
        self._rich.print(tbl)

    @staticmethod
    def _matrix_table(title: str, matrix: list[list[int]]) -> Table:
        tbl = _table(title)
        for _ in matrix:
            tbl.add_column(justify="right")
        tbl.show_header = False
        for row in matrix:
            tbl.add_row(*(str(v) for v in row))
        return tbl

    def _display_rail_fence(self, record: RailFenceVisualization) -> None:
        tbl = _table(f"{record.rails} Rails")
        tbl.show_header = False
        for _ in range(len(record.pattern)):
            tbl.add_column(justify="center", width=1)
        for row in record.grid:
            tbl.add_row(*(ch if ch else "[dim].[/dim]" for ch in row))
        self._rich.print(tbl)

    def _display_columnar(self, record: ColumnarVisualization) -> None:
        tbl = _table(f"Grid ({record.keyword})")
        for letter in record.keyword:
            tbl.add_column(letter, justify="center")
        for row in record.grid:
            tbl.add_row(*row)
        self._rich.print(tbl)

        reads = _table("Read Order")
        reads.add_column("Order", justify="right", style="dim")
        reads.add_column("Columns")
        reads.add_column("Key Letters", justify="center")
        reads.add_column("Content", style="bold bright_white")
        for read in record.reads:
            reads.add_row(
                str(read.order),
                ", ".join(str(c + 1) for c in read.columns),
                read.key_letters,
                read.content,
            )
        self._rich.print(reads)

    def _display_double(self, record: DoubleVisualization) -> None:
        self._rich.print(f"[bold]Padded:[/bold] {record.padded_text}")
        self._rich.print("[bold]First pass[/bold]")
        self._display_columnar(record.first_pass)
        self._rich.print("[bold]Second pass[/bold]")
        self._display_columnar(record.second_pass)

    def _display_super(self, record: SuperVisualization) -> None:
        tbl = _table(f"Passes ({record.order.value})", show_lines=True)
        tbl.add_column("#", style="dim", justify="right")
        tbl.add_column("Method", style="bold")
        tbl.add_column("Key")
        tbl.add_column("Input")
        tbl.add_column("Output", style="bold bright_white")
        for p in record.passes:
            tbl.add_row(str(p.pass_number), p.method_name, p.key, p.input, p.output)
        self._rich.print(tbl)
        self._display_security(record.security)

    def _display_stream(self, record: StreamVisualization) -> None:
        params = record.params
        self._rich.print(
            f"[bold]LCG:[/bold] X(n+1) = ({params.multiplier} * X(n) + {params.increment}) "
            f"mod {params.modulus}, seed {params.seed}"
        )
        tbl = _table("Keystream Bytes")
        tbl.add_column("#", style="dim", justify="right")
        tbl.add_column("Char", justify="center")
        tbl.add_column("State", justify="right")
        tbl.add_column("Plain")
        tbl.add_column("Key")
        tbl.add_column("Cipher", style="bold bright_white")
        for step in record.steps:
            tbl.add_row(
                str(step.position),
                escape(step.char),
                str(step.state),
                f"{step.plain_byte:02X} {step.plain_binary}",
                f"{step.key_byte:02X} {step.key_binary}",
                f"{step.cipher_byte:02X} {step.cipher_binary}",
            )
        self._rich.print(tbl)
        colour = _GRADE_COLOURS.get(record.quality_grade, "white")
        self._rich.print(
            f"[bold]Keystream quality:[/bold] [{colour}]{record.quality_grade}[/{colour}] "
            f"({record.quality_score:.0f}/100)"
        )

    def _display_security(self, security: SecurityAssessment) -> None:
        colour = _score_colour(security.score)
        body = Text()
        body.append("Level: ", style="bold")
        body.append(f"{security.level} ({security.score}/100)", style=colour)
        for issue in security.issues:
            body.append(f"\n• {issue}", style="dim")
        for rec in security.recommendations:
            body.append(f"\n→ {rec}")
        self._rich.print(Panel(body, title="Security", border_style="cyan"))

    # ------------------------------------------------------------------ #
    #  Analysis records
    # ------------------------------------------------------------------ #

    def display_analysis(self, record: AnalysisRecord) -> None:
        self.console.section(f"{record.family.value.replace('_', ' ').title()} Analysis")
        if not record.sufficient:
            self.console.warning(record.message)
            return

        if record.statistics is not None:
            self._display_statistics(record.statistics)

        if isinstance(record, CaesarAnalysis):
            self._display_caesar_analysis(record)
        elif isinstance(record, PolyalphabeticAnalysis):
            self._display_polyalphabetic_analysis(record)
        elif isinstance(record, PolygraphicAnalysis):
            self._display_polygraphic_analysis(record)
        elif isinstance(record, RailFenceAnalysis):
            self._display_rail_analysis(record)
        elif isinstance(record, TranspositionAnalysis):
            self._display_transposition_analysis(record)
        elif isinstance(record, DoubleAnalysis):
            self._display_double_analysis(record)
        elif isinstance(record, StatisticalAnalysis):
            self._display_statistical_analysis(record)
        elif isinstance(record, StreamAnalysis):
            self._display_stream_analysis(record)

        if record.findings:
            self.console.findings_table(record.findings)

    def _display_statistics(self, stats: TextStatistics) -> None:
        summary = Text()
        summary.append("Letters Analysed: ", style="bold")
        summary.append(f"{stats.length:,}\n")
        summary.append("Index of Coincidence: ", style="bold")
        summary.append(f"{stats.index_of_coincidence:.6f}")
        summary.append(f" ({stats.ic_interpretation})\n", style="dim")
        summary.append("Likely Cipher Type: ", style="bold")
        summary.append(f"{stats.classification.value}\n")
        summary.append("Chi-Squared (uniform): ", style="bold")
        summary.append(f"{stats.chi_squared:.4f}")
        summary.append(f" (p={stats.chi_squared_p_value:.6f})\n")
        summary.append("Chi-Squared (English): ", style="bold")
        summary.append(f"{stats.english_chi_squared:.4f}\n")
        summary.append("Entropy: ", style="bold")
        summary.append(f"{stats.entropy:.4f} bits ({stats.entropy_percentage:.1f}% of max)")
        self._rich.print(Panel(summary, title="Statistics", border_style="cyan"))

        if stats.top_letters:
            self.console.table(
                "Most Common Letters",
                ["Letter", "Count", "Frequency"],
                [(n.ngram, n.count, f"{n.frequency:.4f}") for n in stats.top_letters],
            )

    def _display_caesar_analysis(self, record: CaesarAnalysis) -> None:
        self.console.table(
            f"Shift Candidates (best: {record.best_shift})",
            ["Shift", "Chi-Squared vs English", "Preview"],
            [(c.shift, f"{c.english_chi_squared:.2f}", c.preview) for c in record.candidates[:10]],
        )

    def _display_polyalphabetic_analysis(self, record: PolyalphabeticAnalysis) -> None:
        tbl = _table(f"Key Length Candidates (best: {record.best_key_length})")
        tbl.add_column("Length", justify="right")
        tbl.add_column("Average IC", justify="right")
        tbl.add_column("Confidence", justify="right")
        tbl.add_column("Likely", justify="center")
        for c in record.key_lengths:
            tbl.add_row(
                str(c.length),
                f"{c.average_ic:.6f}",
                f"{c.confidence:.1f}%",
                "[green]yes[/green]" if c.likely else "[dim]no[/dim]",
            )
        self._rich.print(tbl)
        if record.repeated_sequence_lengths:
            self._rich.print("[bold]Kasiski Examination - Likely Key Lengths:[/bold]")
            for length in record.repeated_sequence_lengths:
                self._rich.print(f"  [bright_cyan]•[/bright_cyan] {length}")
        if record.is_reciprocal:
            self.console.info("This cipher is reciprocal: decoding applies the same function.")

    def _display_polygraphic_analysis(self, record: PolygraphicAnalysis) -> None:
        self.console.table(
            f"Top Digraphs (block size {record.block_size})",
            ["Digraph", "Count", "Frequency"],
            [(n.ngram, n.count, f"{n.frequency:.4f}") for n in record.top_digraphs],
        )
        if not record.length_fits_blocks:
            self.console.warning(
                f"Length is not a multiple of the block size {record.block_size}."
            )
        if record.doubled_digraphs:
            self.console.info(f"{record.doubled_digraphs} doubled digraph(s) found.")

    def _display_rail_analysis(self, record: RailFenceAnalysis) -> None:
        self.console.table(
            "Rail Count Candidates",
            ["Rails", "Bigram Score", "Preview"],
            [(c.rails, f"{c.bigram_score:.3f}", c.preview) for c in record.candidates],
        )

    def _display_transposition_analysis(self, record: TranspositionAnalysis) -> None:
        columns = ["Columns", "Rows", "Padding", "Exact", "Confidence"]
        with_repeats = any(c.repeated_letters for c in record.candidates)
        if with_repeats:
            columns.append("Repeated Letters")
        rows = []
        for c in record.candidates:
            row = [c.columns, c.rows, c.padding, "yes" if c.exact_factor else "no", c.confidence]
            if with_repeats:
                row.append(c.repeated_letters or "")
            rows.append(row)
        self.console.table("Key Length Candidates", columns, rows)

    def _display_double_analysis(self, record: DoubleAnalysis) -> None:
        self.console.table(
            "Key Length Combinations",
            ["Key 1", "Key 2", "Complexity"],
            [(c.key1_length, c.key2_length, c.complexity) for c in record.combinations],
        )
        if record.security is not None:
            self._display_security(record.security)

    def _display_statistical_analysis(self, record: StatisticalAnalysis) -> None:
        self.console.table(
            "Interpretation",
            ["Measure", "Reading"],
            [
                ("Index of Coincidence", record.ic_interpretation),
                ("Chi-Squared", record.chi_interpretation),
                ("Entropy", record.entropy_interpretation),
            ],
        )
        if record.security is not None:
            self._display_security(record.security)

    def _display_stream_analysis(self, record: StreamAnalysis) -> None:
        summary = Text()
        summary.append("Bytes Analysed: ", style="bold")
        summary.append(f"{record.text_length:,}\n")
        summary.append("Byte Entropy: ", style="bold")
        summary.append(
            f"{record.byte_entropy:.4f} bits/byte ({record.byte_entropy_percentage:.1f}% of max)\n"
        )
        summary.append("Chi-Squared (uniform): ", style="bold")
        summary.append(f"{record.byte_chi_squared:.4f}")
        self._rich.print(Panel(summary, title="Byte Statistics", border_style="cyan"))
        if record.quality is not None:
            self.display_quality(record.quality)

    def display_quality(self, report: LCGQualityReport) -> None:
        colour = _GRADE_COLOURS.get(report.grade, "white")
        summary = Text()
        summary.append("Overall: ", style="bold")
        summary.append(f"{report.grade} ({report.overall_score:.0f}/100)", style=colour)
        summary.append(f"\nSample: {report.sample_size:,} states")
        period = report.detected_period
        summary.append(f"\nDetected period: {period if period is not None else 'none found'}\n")
        summary.append(report.recommendation)
        self._rich.print(Panel(summary, title="LCG Quality", border_style="cyan"))

        tbl = _table("Quality Tests", show_lines=True)
        tbl.add_column("Test", style="bold")
        tbl.add_column("Score", justify="right")
        tbl.add_column("Result", justify="center")
        tbl.add_column("Detail")
        for test in report.tests:
            result_colour = "green" if test.passed else "red"
            tbl.add_row(
                test.name,
                f"{test.score:.0f}",
                f"[{result_colour}]{'PASS' if test.passed else 'FAIL'}[/{result_colour}]",
                test.detail,
            )
        self._rich.print(tbl)

    # ------------------------------------------------------------------ #
    #  Presets and keys
    # ------------------------------------------------------------------ #

    def display_presets(self, presets: Mapping[str, LCGPreset]) -> None:
        self.console.section("LCG Presets")
        self.console.table(
            "Presets",
            ["Name", "Label", "Multiplier", "Increment", "Modulus", "Description"],
            [
                (key, p.name, p.multiplier, p.increment, p.modulus, p.description)
                for key, p in presets.items()
            ],
        )

    def display_key(self, key: str, fmt: str) -> None:
        self.console.section("Generated Key")
        self._rich.print(Panel(Text(key, style="bold bright_white"), title=fmt, border_style="cyan"))
