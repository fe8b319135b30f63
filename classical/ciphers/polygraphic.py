"""
Polygraphic Ciphers
===================

Ciphers that encrypt blocks of letters rather than single letters.

Playfair (digraphs over a 5x5 keyed square, I and J merged):
    - same row       -> each letter takes its right neighbour (wrapping)
    - same column    -> each letter takes the letter below (wrapping)
    - rectangle      -> each letter takes the corner in its own row
    Decryption shifts the other way; the rectangle rule is self-inverse.

Hill (n-letter blocks as column vectors):

.. math::

    C = K P \\pmod{26}, \\qquad P = K^{-1} C \\pmod{26}

A Hill key is only usable when ``gcd(det(K) mod 26, 26) == 1``.  Keys are
checked before any text is touched, for decoding as well as encoding.

References:
    - Wheatstone, C. (1854); published by Lord Playfair.
    - Hill, L. S. (1929). Cryptography in an Algebraic Alphabet.
      The American Mathematical Monthly, 36(6), 306-312.
    - Stallings, W. (2017). Cryptography and Network Security, 7th ed.,
      Section 3.2.
"""

from __future__ import annotations

import re
from typing import Any, Optional, Sequence

from shared.models import Finding, Severity
from classical.analyzers.frequency import FrequencyAnalyzer
from classical.core.errors import CipherFormatError, KeyShapeError
from classical.core.models import (
    AnalysisRecord,
    CipherFamilyName,
    DigraphStep,
    HillBlockStep,
    HillKeyValidation,
    HillVisualization,
    ParameterValidation,
    PlayfairVisualization,
    PolygraphicAnalysis,
)
from classical.core.modmath import (
    MODULUS,
    SUPPORTED_SIZES,
    determinant,
    inverse_matrix,
    is_square_matrix,
    matrix_vector_mod,
    mod,
    mod_inverse,
)
from classical.core.normalize import (
    indices_to_text,
    normalize_text,
    require_keyword,
    require_text,
    text_to_indices,
)

PLAYFAIR_ALPHABET = "ABCDEFGHIKLMNOPQRSTUVWXYZ"   # no J

Matrix = list[list[int]]


def _polygraphic_analysis(
    family: CipherFamilyName,
    ciphertext: str,
    analyzer: FrequencyAnalyzer,
    minimum: int,
    block_size: int,
    findings: Optional[list[Finding]] = None,
) -> AnalysisRecord:
    text = normalize_text(ciphertext)
    if len(text) < minimum:
        return PolygraphicAnalysis.insufficient(family, len(text), minimum)

    pairs = [text[i : i + 2] for i in range(0, len(text) - 1, 2)]
    return PolygraphicAnalysis(
        family=family,
        text_length=len(text),
        minimum_length=minimum,
        statistics=analyzer.statistics(text),
        top_digraphs=analyzer.ngram_frequencies(text, 2, 10),
        block_size=block_size,
        length_fits_blocks=len(text) % block_size == 0,
        doubled_digraphs=sum(1 for p in pairs if p[0] == p[1]),
        findings=findings or [],
    )


# ===================================================================== #
#  Playfair
# ===================================================================== #


class PlayfairCipher:
    """Digraph substitution over a keyed 5x5 square.

    Usage::

        pf = PlayfairCipher()
        pf.encode("balloon", "MONARCHY")    # 'IBSUPMNA'
    """

    name = CipherFamilyName.PLAYFAIR

    def __init__(
        self,
        *,
        filler: str = "X",
        alt_filler: str = "Q",
        min_key_length: int = 2,
        analyzer: Optional[FrequencyAnalyzer] = None,
        min_analysis_length: int = 20,
    ) -> None:
        self.filler = filler
        self.alt_filler = alt_filler
        self.min_key_length = min_key_length
        self.analyzer = analyzer or FrequencyAnalyzer()
        self.min_analysis_length = min_analysis_length

    # ------------------------------------------------------------------ #
    #  Grid and digraphs
    # ------------------------------------------------------------------ #

    @staticmethod
    def generate_grid(keyword: str) -> list[list[str]]:
        """Deduplicated keyword (J as I) followed by the rest of the alphabet."""
        seen: list[str] = []
        for ch in normalize_text(keyword).replace("J", "I") + PLAYFAIR_ALPHABET:
            if ch not in seen:
                seen.append(ch)
        return [seen[r * 5 : r * 5 + 5] for r in range(5)]

    @staticmethod
    def _positions(grid: Sequence[Sequence[str]]) -> dict[str, tuple[int, int]]:
        return {ch: (r, c) for r, row in enumerate(grid) for c, ch in enumerate(row)}

    def _separator(self, letter: str) -> str:
        return self.alt_filler if letter == self.filler else self.filler

    def make_digraphs(self, text: str) -> list[str]:
        """Split canonical *text* into digraphs with no doubled letters.

        A filler goes between two equal letters and after an odd last
        letter; if that letter is the filler itself the alternate filler
        is used.
        """
        letters = normalize_text(text).replace("J", "I")
        digraphs: list[str] = []
        i = 0
        while i < len(letters):
            first = letters[i]
            second = letters[i + 1] if i + 1 < len(letters) else None
            if second is None or second == first:
                digraphs.append(first + self._separator(first))
                i += 1
            else:
                digraphs.append(first + second)
                i += 2
        return digraphs

    @staticmethod
    def _rule(a: tuple[int, int], b: tuple[int, int]) -> str:
        if a[0] == b[0]:
            return "row"
        if a[1] == b[1]:
            return "column"
        return "rectangle"

    def _transform(
        self, grid: list[list[str]], pos: dict[str, tuple[int, int]], pair: str, step: int
    ) -> tuple[str, str]:
        (r1, c1), (r2, c2) = pos[pair[0]], pos[pair[1]]
        rule = self._rule((r1, c1), (r2, c2))
        if rule == "row":
            out = grid[r1][(c1 + step) % 5] + grid[r2][(c2 + step) % 5]
        elif rule == "column":
            out = grid[(r1 + step) % 5][c1] + grid[(r2 + step) % 5][c2]
        else:
            out = grid[r1][c2] + grid[r2][c1]
        return out, rule

    # ------------------------------------------------------------------ #
    #  Contract
    # ------------------------------------------------------------------ #

    def encode(self, text: str, key: Any) -> str:
        keyword = require_keyword(key, self.min_key_length)
        require_text(text)
        grid = self.generate_grid(keyword)
        pos = self._positions(grid)
        return "".join(self._transform(grid, pos, d, 1)[0] for d in self.make_digraphs(text))

    def decode(self, ciphertext: str, key: Any) -> str:
        keyword = require_keyword(key, self.min_key_length)
        cipher = require_text(ciphertext, "ciphertext").replace("J", "I")
        if len(cipher) % 2:
            raise CipherFormatError(
                f"Playfair ciphertext must have an even number of letters (got {len(cipher)})"
            )
        grid = self.generate_grid(keyword)
        pos = self._positions(grid)
        return "".join(
            self._transform(grid, pos, cipher[i : i + 2], -1)[0]
            for i in range(0, len(cipher), 2)
        )

    def visualize(self, text: str, key: Any) -> Optional[PlayfairVisualization]:
        keyword = require_keyword(key, self.min_key_length)
        if not normalize_text(text):
            return None
        grid = self.generate_grid(keyword)
        pos = self._positions(grid)
        digraphs = self.make_digraphs(text)

        steps = []
        for pair in digraphs:
            out, rule = self._transform(grid, pos, pair, 1)
            steps.append(DigraphStep(
                plain=pair,
                cipher=out,
                rule=rule,
                positions=[pos[pair[0]], pos[pair[1]]],
            ))
        return PlayfairVisualization(
            family=self.name,
            plaintext=normalize_text(text).replace("J", "I"),
            ciphertext="".join(s.cipher for s in steps),
            keyword="".join(dict.fromkeys(keyword.replace("J", "I"))),
            grid=grid,
            prepared_text="".join(digraphs),
            digraphs=steps,
        )

    def analyze(self, ciphertext: str, key: Any = None) -> AnalysisRecord:
        return _polygraphic_analysis(
            self.name, ciphertext, self.analyzer, self.min_analysis_length, 2
        )

    # ------------------------------------------------------------------ #
    #  Helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def validate_grid(grid: Any) -> ParameterValidation:
        """Check that *grid* is 5x5 with 25 distinct single letters."""
        errors: list[str] = []
        if not isinstance(grid, Sequence) or len(grid) != 5:
            return ParameterValidation(valid=False, errors=["Grid must have exactly 5 rows"])
        seen: set[str] = set()
        for r, row in enumerate(grid):
            if not isinstance(row, Sequence) or len(row) != 5:
                errors.append(f"Row {r} must have exactly 5 columns")
                continue
            for c, ch in enumerate(row):
                if not isinstance(ch, str) or len(ch) != 1:
                    errors.append(f"Invalid character at position [{r}][{c}]")
                elif ch in seen:
                    errors.append(f"Duplicate character '{ch}' found")
                else:
                    seen.add(ch)
        return ParameterValidation(valid=not errors, errors=errors)

    @classmethod
    def letter_positions(cls, grid: Any) -> dict[str, tuple[int, int]]:
        """Map every letter of a 5x5 grid to its ``(row, column)``.

        Raises:
            KeyShapeError: *grid* fails :meth:`validate_grid`.
        """
        validation = cls.validate_grid(grid)
        if not validation.valid:
            raise KeyShapeError(f"invalid Playfair grid: {'; '.join(validation.errors)}")
        return cls._positions(grid)

    @staticmethod
    def format_digraphs(digraphs: Sequence[str]) -> str:
        return " ".join(f"[{d}]" for d in digraphs)

    def clean_decrypted_text(self, text: str) -> str:
        """Drop trailing filler and fillers separating two equal letters.

        This is a guess: a genuine filler letter in those positions is
        removed too.
        """
        cleaned = text
        while len(cleaned) > 1 and cleaned.endswith(self.filler):
            cleaned = cleaned[:-1]
        f = re.escape(self.filler)
        return re.sub(rf"([A-Z]){f}(?=\1)", r"\1", cleaned)


# ===================================================================== #
#  Hill
# ===================================================================== #


def parse_matrix_key(raw: str) -> Matrix:
    """Parse a flat, row-major, comma-separated matrix key.

    >>> parse_matrix_key("3, 3, 2, 5")
    [[3, 3], [2, 5]]

    Raises:
        KeyShapeError: Non-integer entries or an entry count that is not
            4, 9 or 16.
    """
    parts = [p for p in re.split(r"[,\s;]+", raw.strip()) if p]
    try:
        values = [int(p) for p in parts]
    except ValueError:
        raise KeyShapeError(f"matrix key must be comma-separated integers, got {raw!r}") from None
    for n in SUPPORTED_SIZES:
        if len(values) == n * n:
            return [values[r * n : (r + 1) * n] for r in range(n)]
    raise KeyShapeError(
        f"matrix key must have 4, 9 or 16 entries (got {len(values)})"
    )


def format_matrix_key(matrix: Sequence[Sequence[int]]) -> str:
    """Flat comma-separated view of *matrix*, row-major."""
    return ",".join(str(int(v)) for row in matrix for v in row)


class HillCipher:
    """Matrix cipher over 2x2, 3x3 or 4x4 keys.

    Usage::

        hill = HillCipher()
        ct = hill.encode("HELP", [[3, 3], [2, 5]])
        hill.decode(ct, [[3, 3], [2, 5]])    # 'HELP'
    """

    name = CipherFamilyName.HILL

    def __init__(
        self,
        *,
        filler: str = "X",
        analyzer: Optional[FrequencyAnalyzer] = None,
        min_analysis_length: int = 20,
    ) -> None:
        self.filler = filler
        self.analyzer = analyzer or FrequencyAnalyzer()
        self.min_analysis_length = min_analysis_length

    @staticmethod
    def validate_key(matrix: Any) -> HillKeyValidation:
        """Check size, entry range and invertibility mod 26.  Never raises."""
        if isinstance(matrix, str):
            try:
                matrix = parse_matrix_key(matrix)
            except KeyShapeError as exc:
                return HillKeyValidation(valid=False, message=str(exc))
        if not is_square_matrix(matrix):
            return HillKeyValidation(valid=False, message="Matrix must be square")
        size = len(matrix)
        if size not in SUPPORTED_SIZES:
            return HillKeyValidation(
                valid=False,
                message=f"Matrix must be 2x2, 3x3 or 4x4 (got {size}x{size})",
                size=size,
            )
        if any(not 0 <= v < MODULUS for row in matrix for v in row):
            return HillKeyValidation(
                valid=False, message="Matrix entries must be between 0 and 25", size=size
            )

        det = determinant(matrix)
        det_mod = mod(det, MODULUS)
        det_inv = mod_inverse(det_mod, MODULUS)
        if det_inv is None:
            return HillKeyValidation(
                valid=False,
                message=f"Determinant ({det}) has no inverse mod 26. Try different values.",
                size=size,
                determinant=det,
                determinant_mod26=det_mod,
            )
        return HillKeyValidation(
            valid=True,
            message="Matrix is valid",
            size=size,
            determinant=det,
            determinant_mod26=det_mod,
            determinant_inverse=det_inv,
            inverse=inverse_matrix(matrix),
        )

    def _require_key(self, key: Any) -> tuple[Matrix, HillKeyValidation]:
        matrix = parse_matrix_key(key) if isinstance(key, str) else key
        validation = self.validate_key(matrix)
        if not validation.valid:
            raise KeyShapeError(validation.message)
        return [[int(v) for v in row] for row in matrix], validation

    def pad(self, text: str, block_size: int) -> str:
        remainder = len(text) % block_size
        if remainder:
            text += self.filler * (block_size - remainder)
        return text

    def _apply(self, matrix: Sequence[Sequence[int]], text: str) -> str:
        n = len(matrix)
        values = text_to_indices(text)
        out: list[int] = []
        for i in range(0, len(values), n):
            out.extend(matrix_vector_mod(matrix, values[i : i + n]))
        return indices_to_text(out)

    def encode(self, text: str, key: Any) -> str:
        matrix, _ = self._require_key(key)
        plain = require_text(text)
        return self._apply(matrix, self.pad(plain, len(matrix)))

    def decode(self, ciphertext: str, key: Any) -> str:
        matrix, validation = self._require_key(key)
        cipher = require_text(ciphertext, "ciphertext")
        if len(cipher) % len(matrix):
            raise CipherFormatError(
                f"Hill ciphertext length must be a multiple of {len(matrix)} (got {len(cipher)})"
            )
        return self._apply(validation.inverse, cipher)

    def visualize(self, text: str, key: Any) -> Optional[HillVisualization]:
        matrix, validation = self._require_key(key)
        plain = normalize_text(text)
        if not plain:
            return None
        n = len(matrix)
        padded = self.pad(plain, n)

        blocks = []
        for b, i in enumerate(range(0, len(padded), n)):
            vector = text_to_indices(padded[i : i + n])
            cipher_vector = matrix_vector_mod(matrix, vector)
            blocks.append(HillBlockStep(
                block=b,
                plain_text=padded[i : i + n],
                plain_vector=vector,
                cipher_vector=cipher_vector,
                cipher_text=indices_to_text(cipher_vector),
            ))
        return HillVisualization(
            family=self.name,
            plaintext=plain,
            ciphertext="".join(b.cipher_text for b in blocks),
            matrix=matrix,
            inverse_matrix=validation.inverse,
            determinant=validation.determinant,
            padded_text=padded,
            blocks=blocks,
        )

    def analyze(self, ciphertext: str, key: Any = None) -> AnalysisRecord:
        """Digraph statistics grouped by the key's block size.

        An unusable *key* does not raise: blocks default to 2 and the
        record carries a finding explaining why.
        """
        block_size = 2
        findings: list[Finding] = []
        if key is not None:
            validation = self.validate_key(key)
            if validation.valid:
                block_size = validation.size
            else:
                findings.append(Finding(
                    severity=Severity.LOW,
                    title="Unusable Hill key",
                    description=f"{validation.message}; assuming 2-letter blocks.",
                    recommendation="Use a square key whose determinant is coprime to 26.",
                ))
        return _polygraphic_analysis(
            self.name, ciphertext, self.analyzer, self.min_analysis_length, block_size, findings
        )
