"""
Transposition Ciphers
=====================

Ciphers that permute letter positions without substituting any letter.

    - Rail Fence:  write along a zigzag of r rails, read rail by rail.
    - Columnar:    write row-major under a keyword, read whole columns in
                   alphabetical keyword order (ties by position).
    - Myszkowski:  as Columnar, but columns under equal keyword letters
                   form one group that is read across, row by row.
    - Double:      Columnar twice, with key1 then key2.

Column ordering is always a list of groups of column indices.  Columnar
is the case where every group holds a single column, so both ciphers share
grid construction and reading.

Columnar grids are right-padded with the filler to a full rectangle and
decoding trims trailing filler.  A plaintext that genuinely ends in the
filler letter loses it.

References:
    - Kahn, D. (1996). The Codebreakers, chapter 13. Scribner.
    - Myszkowski, E. (1902). Cryptographie indechiffrable. Paris.
    - Gaines, H. F. (1956). Cryptanalysis: A Study of Ciphers and Their
      Solution, chapters 11-12. Dover.
"""

from __future__ import annotations

import math
from typing import Any, Optional, Sequence

from pydantic import ValidationError

from classical.analyzers.frequency import FrequencyAnalyzer
from classical.core.errors import KeyShapeError
from classical.core.models import (
    AnalysisRecord,
    CipherFamilyName,
    ColumnCandidate,
    ColumnarVisualization,
    ColumnRead,
    DoubleAnalysis,
    DoubleKey,
    DoubleVisualization,
    GridEfficiency,
    KeyCombination,
    KeyComparison,
    LayeringComparison,
    MyszkowskiComparison,
    ParameterValidation,
    RailCandidate,
    RailFenceAnalysis,
    RailFenceVisualization,
    SecurityAssessment,
    TranspositionAnalysis,
)
from classical.core.normalize import (
    keyword_errors,
    normalize_key,
    normalize_text,
    require_keyword,
    require_text,
)


# ===================================================================== #
#  Grid primitives
# ===================================================================== #


def column_groups(keyword: str, merge_repeats: bool = False) -> list[list[int]]:
    """Reading order of columns as groups of column indices.

    Columns are sorted by keyword letter, stable on position.  With
    *merge_repeats* (Myszkowski) columns under the same letter share a
    group; otherwise every group is a single column.

    >>> column_groups("TOMATO")
    [[3], [2], [1], [5], [0], [4]]
    >>> column_groups("TOMATO", merge_repeats=True)
    [[3], [2], [1, 5], [0, 4]]
    """
    ordered = sorted(range(len(keyword)), key=lambda i: (keyword[i], i))
    if not merge_repeats:
        return [[i] for i in ordered]
    groups: list[list[int]] = []
    for i in ordered:
        if groups and keyword[groups[-1][0]] == keyword[i]:
            groups[-1].append(i)
        else:
            groups.append([i])
    return groups


def build_grid(text: str, cols: int, filler: str = "X") -> tuple[str, list[list[str]]]:
    """Pad *text* to a multiple of *cols* and cut it into rows."""
    rows = max(1, math.ceil(len(text) / cols))
    padded = text + filler * (rows * cols - len(text))
    return padded, [list(padded[r * cols : (r + 1) * cols]) for r in range(rows)]


def read_groups(grid: Sequence[Sequence[str]], groups: Sequence[Sequence[int]]) -> list[str]:
    """Content of each group, reading its columns across row by row."""
    return [
        "".join(grid[r][c] for r in range(len(grid)) for c in group)
        for group in groups
    ]


def fill_groups(text: str, cols: int, groups: Sequence[Sequence[int]]) -> list[list[str]]:
    """Inverse of :func:`read_groups`: refill a grid in group reading order.

    Cells left over when *text* is shorter than the grid stay empty.
    """
    rows = max(1, math.ceil(len(text) / cols))
    grid = [[""] * cols for _ in range(rows)]
    index = 0
    for group in groups:
        for r in range(rows):
            for c in group:
                if index < len(text):
                    grid[r][c] = text[index]
                    index += 1
    return grid


def transpose(text: str, keyword: str, filler: str = "X", merge_repeats: bool = False) -> str:
    """One columnar (or Myszkowski) pass over canonical *text*."""
    _, grid = build_grid(text, len(keyword), filler)
    return "".join(read_groups(grid, column_groups(keyword, merge_repeats)))


def untranspose(text: str, keyword: str, merge_repeats: bool = False) -> str:
    """Undo :func:`transpose`; padding is left in place."""
    grid = fill_groups(text, len(keyword), column_groups(keyword, merge_repeats))
    return "".join("".join(row) for row in grid)


# ===================================================================== #
#  Rail Fence
# ===================================================================== #


def rail_pattern(length: int, rails: int) -> list[int]:
    """Rail index of each position on the zigzag."""
    pattern = []
    rail, step = 0, 1
    for _ in range(length):
        pattern.append(rail)
        if rail == 0:
            step = 1
        elif rail == rails - 1:
            step = -1
        rail += step
    return pattern


class RailFenceCipher:
    """Zigzag transposition over *rails* rows.

    Usage::

        rf = RailFenceCipher()
        rf.encode("WE ARE DISCOVERED", 3)     # 'WECRERDSOEEAIVD'
    """

    name = CipherFamilyName.RAIL_FENCE

    def __init__(
        self,
        *,
        analyzer: Optional[FrequencyAnalyzer] = None,
        min_analysis_length: int = 10,
        max_rails_searched: int = 10,
    ) -> None:
        self.analyzer = analyzer or FrequencyAnalyzer()
        self.min_analysis_length = min_analysis_length
        self.max_rails_searched = max_rails_searched

    @staticmethod
    def coerce_rails(key: Any) -> int:
        if isinstance(key, str) and key.strip().lstrip("-").isdigit():
            key = int(key)
        if isinstance(key, bool) or not isinstance(key, int):
            raise KeyShapeError(f"rail count must be an integer, got {key!r}")
        if key < 2:
            raise KeyShapeError(f"rail count must be at least 2 (got {key})")
        return key

    def _encode(self, text: str, rails: int) -> str:
        if rails >= len(text):
            return text
        pattern = rail_pattern(len(text), rails)
        return "".join(
            text[i] for r in range(rails) for i in range(len(text)) if pattern[i] == r
        )

    def _decode(self, text: str, rails: int) -> str:
        if rails >= len(text):
            return text
        pattern = rail_pattern(len(text), rails)
        # positions in the order their letters appear in the ciphertext
        reading_order = sorted(range(len(text)), key=lambda i: (pattern[i], i))
        out = [""] * len(text)
        for ch, pos in zip(text, reading_order):
            out[pos] = ch
        return "".join(out)

    def encode(self, text: str, key: Any) -> str:
        rails = self.coerce_rails(key)
        return self._encode(require_text(text), rails)

    def decode(self, ciphertext: str, key: Any) -> str:
        rails = self.coerce_rails(key)
        return self._decode(require_text(ciphertext, "ciphertext"), rails)

    def visualize(self, text: str, key: Any) -> Optional[RailFenceVisualization]:
        rails = self.coerce_rails(key)
        plain = normalize_text(text)
        if not plain:
            return None
        pattern = rail_pattern(len(plain), rails)
        grid = [[""] * len(plain) for _ in range(rails)]
        for i, (ch, r) in enumerate(zip(plain, pattern)):
            grid[r][i] = ch
        return RailFenceVisualization(
            family=self.name,
            plaintext=plain,
            ciphertext=self._encode(plain, rails),
            rails=rails,
            grid=grid,
            pattern=pattern,
            reading_order=sorted(range(len(plain)), key=lambda i: (pattern[i], i)),
        )

    def analyze(self, ciphertext: str, key: Any = None) -> AnalysisRecord:
        """Try every rail count and rank the decodings by English bigram share."""
        text = normalize_text(ciphertext)
        if len(text) < self.min_analysis_length:
            return RailFenceAnalysis.insufficient(self.name, len(text), self.min_analysis_length)

        candidates = []
        for rails in range(2, min(self.max_rails_searched, len(text) - 1) + 1):
            plain = self._decode(text, rails)
            candidates.append(RailCandidate(
                rails=rails,
                bigram_score=round(self.analyzer.bigram_score(plain), 4),
                preview=plain[:30],
            ))
        candidates.sort(key=lambda c: (-c.bigram_score, c.rails))
        return RailFenceAnalysis(
            family=self.name,
            text_length=len(text),
            minimum_length=self.min_analysis_length,
            statistics=self.analyzer.statistics(text),
            candidates=candidates,
        )


# ===================================================================== #
#  Columnar and Myszkowski
# ===================================================================== #


def _grid_visualization(
    family: CipherFamilyName,
    text: str,
    keyword: str,
    filler: str,
    merge_repeats: bool,
) -> ColumnarVisualization:
    padded, grid = build_grid(text, len(keyword), filler)
    groups = column_groups(keyword, merge_repeats)
    contents = read_groups(grid, groups)
    return ColumnarVisualization(
        family=family,
        plaintext=text,
        ciphertext="".join(contents),
        keyword=keyword,
        padded_text=padded,
        grid=grid,
        column_groups=groups,
        reads=[
            ColumnRead(
                order=n + 1,
                columns=list(group),
                key_letters="".join(keyword[c] for c in group),
                content=content,
            )
            for n, (group, content) in enumerate(zip(groups, contents))
        ],
    )


def _column_candidates(length: int, with_repeats: bool) -> list[ColumnCandidate]:
    """Plausible keyword lengths: exact factors of *length* first."""
    lengths = [k for k in range(2, min(20, length // 2) + 1) if length % k == 0]
    if not lengths:
        lengths = list(range(2, min(20, math.isqrt(length) + 5) + 1))

    candidates = []
    for k in lengths:
        rows = math.ceil(length / k)
        exact = length % k == 0
        repeated = None
        if with_repeats:
            repeated = "High" if k >= 8 else "Medium" if k >= 5 else "Low"
        candidates.append(ColumnCandidate(
            columns=k,
            rows=rows,
            padding=rows * k - length,
            exact_factor=exact,
            confidence="High" if exact else "Medium",
            repeated_letters=repeated,
        ))
    candidates.sort(key=lambda c: (not c.exact_factor, c.padding, c.columns))
    return candidates


class ColumnarCipher:
    """Keyed columnar transposition, and Myszkowski with *merge_repeats*.

    Myszkowski reads the columns under equal keyword letters together;
    with a keyword of distinct letters the two are identical.

    Usage::

        col = ColumnarCipher()
        col.encode("WE ARE DISCOVERED", "ZEBRAS")
        mysz = ColumnarCipher(merge_repeats=True)
        mysz.encode("WE ARE DISCOVERED", "TOMATO")
    """

    def __init__(
        self,
        *,
        merge_repeats: bool = False,
        filler: str = "X",
        min_key_length: int = 2,
        analyzer: Optional[FrequencyAnalyzer] = None,
        min_analysis_length: int = 10,
    ) -> None:
        self.merge_repeats = merge_repeats
        self.name = (
            CipherFamilyName.MYSZKOWSKI if merge_repeats else CipherFamilyName.COLUMNAR
        )
        self.filler = filler
        self.min_key_length = min_key_length
        self.analyzer = analyzer or FrequencyAnalyzer()
        self.min_analysis_length = min_analysis_length

    def encode(self, text: str, key: Any) -> str:
        keyword = require_keyword(key, self.min_key_length)
        return transpose(require_text(text), keyword, self.filler, self.merge_repeats)

    def decode(self, ciphertext: str, key: Any) -> str:
        keyword = require_keyword(key, self.min_key_length)
        plain = untranspose(require_text(ciphertext, "ciphertext"), keyword, self.merge_repeats)
        return plain.rstrip(self.filler)

    def visualize(self, text: str, key: Any) -> Optional[ColumnarVisualization]:
        keyword = require_keyword(key, self.min_key_length)
        plain = normalize_text(text)
        if not plain:
            return None
        return _grid_visualization(self.name, plain, keyword, self.filler, self.merge_repeats)

    def analyze(self, ciphertext: str, key: Any = None) -> AnalysisRecord:
        text = normalize_text(ciphertext)
        if len(text) < self.min_analysis_length:
            return TranspositionAnalysis.insufficient(
                self.name, len(text), self.min_analysis_length
            )
        return TranspositionAnalysis(
            family=self.name,
            text_length=len(text),
            minimum_length=self.min_analysis_length,
            statistics=self.analyzer.statistics(text),
            candidates=_column_candidates(len(text), self.merge_repeats),
        )

    # ------------------------------------------------------------------ #
    #  Helpers
    # ------------------------------------------------------------------ #

    def validate_params(self, text: str, key: Any) -> ParameterValidation:
        """Collect every problem with *text* and *key* without raising."""
        errors = keyword_errors(key, self.min_key_length)
        if not isinstance(text, str) or not normalize_text(text):
            errors.append("Text must contain at least one alphabetic character")
        warnings = []
        if self.merge_repeats and not errors and not self.repeated_letter_positions(key):
            warnings.append(
                "Key has no repeated letters; Myszkowski reads exactly like Columnar."
            )
        return ParameterValidation(valid=not errors, errors=errors, warnings=warnings)

    def efficiency(self, text: str, key: Any) -> GridEfficiency:
        """How much of the grid is plaintext rather than filler."""
        keyword = require_keyword(key, self.min_key_length)
        plain = require_text(text)
        total = math.ceil(len(plain) / len(keyword)) * len(keyword)
        padding = total - len(plain)
        efficiency = len(plain) / total * 100
        return GridEfficiency(
            original_length=len(plain),
            grid_size=total,
            padding=padding,
            padding_percentage=round(padding / total * 100, 2),
            efficiency=round(efficiency, 2),
            column_groups=len(column_groups(keyword, self.merge_repeats)),
            grade="Excellent" if efficiency >= 95 else "Good" if efficiency >= 85 else "Fair",
        )

    def compare_keys(self, key1: Any, key2: Any) -> KeyComparison:
        k1 = require_keyword(key1, self.min_key_length, "key1")
        k2 = require_keyword(key2, self.min_key_length, "key2")
        order1 = column_groups(k1, self.merge_repeats)
        order2 = column_groups(k2, self.merge_repeats)
        return KeyComparison(
            key1=k1,
            key2=k2,
            length1=len(k1),
            length2=len(k2),
            order1=order1,
            order2=order2,
            same_length=len(k1) == len(k2),
            same_order=order1 == order2,
        )

    @staticmethod
    def repeated_letter_positions(key: str) -> dict[str, list[int]]:
        """Column indices of every keyword letter that occurs more than once.

        >>> ColumnarCipher.repeated_letter_positions("TOMATO")
        {'T': [0, 4], 'O': [1, 5]}
        """
        positions: dict[str, list[int]] = {}
        for i, ch in enumerate(normalize_key(key)):
            positions.setdefault(ch, []).append(i)
        return {ch: pos for ch, pos in positions.items() if len(pos) > 1}

    def compare_with_columnar(self, key: Any) -> MyszkowskiComparison:
        keyword = require_keyword(key, self.min_key_length)
        repeated = {
            ch: len(pos) for ch, pos in self.repeated_letter_positions(keyword).items()
        }
        if repeated:
            behavior = "Groups columns with same key letter together (Myszkowski behavior)"
            note = "Myszkowski grouping makes pattern analysis slightly harder"
        else:
            behavior = "Same as standard columnar transposition (no repeated letters)"
            note = "No security difference from columnar transposition"
        return MyszkowskiComparison(
            keyword=keyword,
            key_length=len(keyword),
            unique_letters=len(set(keyword)),
            has_repeated_letters=bool(repeated),
            repeated_letters=repeated,
            column_groups=len(column_groups(keyword, merge_repeats=True)),
            behavior=behavior,
            security_note=note,
        )


# ===================================================================== #
#  Double transposition
# ===================================================================== #


def coerce_double_key(key: Any) -> DoubleKey:
    if isinstance(key, DoubleKey):
        return key
    if isinstance(key, str):
        return DoubleKey(key1=key)
    if isinstance(key, (tuple, list)) and 1 <= len(key) <= 2:
        return DoubleKey(key1=key[0], key2=key[1] if len(key) == 2 else None)
    if isinstance(key, dict):
        return DoubleKey(**key)
    raise KeyShapeError("double transposition key must be a keyword or a (key1, key2) pair")


class DoubleTranspositionCipher:
    """Columnar transposition applied twice.

    The text is padded up front to a multiple of ``lcm(len(key1),
    len(key2))`` so neither pass adds filler of its own and decoding is
    exact.
    """

    name = CipherFamilyName.DOUBLE

    def __init__(
        self,
        *,
        filler: str = "X",
        min_key_length: int = 2,
        analyzer: Optional[FrequencyAnalyzer] = None,
        min_analysis_length: int = 20,
    ) -> None:
        self.filler = filler
        self.min_key_length = min_key_length
        self.analyzer = analyzer or FrequencyAnalyzer()
        self.min_analysis_length = min_analysis_length

    def keys(self, key: Any) -> tuple[str, str]:
        dk = coerce_double_key(key)
        key1 = require_keyword(dk.key1, self.min_key_length, "key1")
        key2 = key1 if dk.key2 is None else require_keyword(dk.key2, self.min_key_length, "key2")
        return key1, key2

    def pad(self, text: str, key1: str, key2: str) -> str:
        block = math.lcm(len(key1), len(key2))
        return text + self.filler * (-len(text) % block)

    def encode(self, text: str, key: Any) -> str:
        key1, key2 = self.keys(key)
        padded = self.pad(require_text(text), key1, key2)
        return transpose(transpose(padded, key1, self.filler), key2, self.filler)

    def decode(self, ciphertext: str, key: Any) -> str:
        key1, key2 = self.keys(key)
        cipher = require_text(ciphertext, "ciphertext")
        return untranspose(untranspose(cipher, key2), key1).rstrip(self.filler)

    def visualize(self, text: str, key: Any) -> Optional[DoubleVisualization]:
        key1, key2 = self.keys(key)
        plain = normalize_text(text)
        if not plain:
            return None
        padded = self.pad(plain, key1, key2)
        first = _grid_visualization(CipherFamilyName.COLUMNAR, padded, key1, self.filler, False)
        second = _grid_visualization(
            CipherFamilyName.COLUMNAR, first.ciphertext, key2, self.filler, False
        )
        return DoubleVisualization(
            family=self.name,
            plaintext=plain,
            ciphertext=second.ciphertext,
            key1=key1,
            key2=key2,
            padded_text=padded,
            first_pass=first,
            second_pass=second,
        )

    @staticmethod
    def security_level(combinations: Sequence[KeyCombination]) -> SecurityAssessment:
        """Heuristic level from the mean complexity of candidate key pairs."""
        avg = (
            sum(c.complexity for c in combinations) / len(combinations)
            if combinations else 0.0
        )
        if avg > 100:
            return SecurityAssessment(
                level="Very High", score=95,
                issues=["Extremely difficult to break without key knowledge"],
            )
        if avg > 50:
            return SecurityAssessment(
                level="High", score=80,
                issues=["Strong encryption, resistant to simple attacks"],
            )
        if avg > 25:
            return SecurityAssessment(
                level="Medium", score=60,
                issues=["Moderate security, vulnerable to advanced cryptanalysis"],
            )
        return SecurityAssessment(
            level="Low", score=40,
            issues=["Weak encryption for short texts"],
            recommendations=["Use longer keys"],
        )

    def analyze(self, ciphertext: str, key: Any = None) -> AnalysisRecord:
        text = normalize_text(ciphertext)
        n = len(text)
        if n < self.min_analysis_length:
            return DoubleAnalysis.insufficient(self.name, n, self.min_analysis_length)

        combinations = []
        for len1 in range(2, min(15, math.isqrt(n)) + 1):
            first_pass = math.ceil(n / len1) * len1
            for len2 in range(2, min(15, math.isqrt(first_pass)) + 1):
                combinations.append(KeyCombination(
                    key1_length=len1, key2_length=len2, complexity=len1 * len2
                ))
        combinations.sort(key=lambda c: (-c.complexity, c.key1_length))
        return DoubleAnalysis(
            family=self.name,
            text_length=n,
            minimum_length=self.min_analysis_length,
            statistics=self.analyzer.statistics(text),
            combinations=combinations[:20],
            security=self.security_level(combinations),
        )

    def validate_params(self, text: str, key: Any) -> ParameterValidation:
        """Collect every problem with *text* and *key* without raising."""
        try:
            dk = coerce_double_key(key)
        except (KeyShapeError, ValidationError):
            return ParameterValidation(
                valid=False,
                errors=["Key must be a keyword or a (key1, key2) pair of keywords"],
            )
        errors = keyword_errors(dk.key1, self.min_key_length, "Key1")
        if dk.key2 is not None:
            errors.extend(keyword_errors(dk.key2, self.min_key_length, "Key2"))
        if not isinstance(text, str) or not normalize_text(text):
            errors.append("Text must contain at least one alphabetic character")
        return ParameterValidation(valid=not errors, errors=errors)

    def compare_with_single(self, key: Any) -> LayeringComparison:
        """Column-order complexity of both passes against a single pass."""
        key1, key2 = self.keys(key)
        single = len(key1)
        layered = len(key1) * len(key2)
        return LayeringComparison(
            single_complexity=single,
            layered_complexity=layered,
            improvement_percentage=round((layered - single) / single * 100, 2),
            recommendation=(
                "Double transposition provides significantly better security"
                if layered > 50
                else "Consider using longer keys for better security"
            ),
        )
