"""
Cipher Lab Data Models
======================

Pydantic models for key material, step-by-step visualization records and
cryptanalysis results.

Visualization records are frozen: they describe one finished transform and
are rendered by the console layer or dumped to JSON by the CLI.  Analysis
records all derive from :class:`AnalysisRecord`, whose ``sufficient`` flag
is ``False`` when the ciphertext is too short for the family's statistics.

References:
    - Friedman, W. F. (1922). The Index of Coincidence and Its
      Applications in Cryptography. Riverbank Publication No. 22.
    - Kasiski, F. W. (1863). Die Geheimschriften und die
      Dechiffrir-Kunst. Mittler und Sohn.
    - Knuth, D. E. (1997). The Art of Computer Programming, Vol. 2,
      Section 3.2.1 (linear congruential generators).
"""

from __future__ import annotations

import enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from shared.models import Finding


# ===================================================================== #
#  Enumerations
# ===================================================================== #


class CipherFamilyName(str, enum.Enum):
    """Registry tags for every cipher family."""

    CAESAR = "caesar"
    VIGENERE = "vigenere"
    BEAUFORT = "beaufort"
    AUTOKEY = "autokey"
    PLAYFAIR = "playfair"
    HILL = "hill"
    RAIL_FENCE = "rail_fence"
    COLUMNAR = "columnar"
    MYSZKOWSKI = "myszkowski"
    DOUBLE = "double"
    SUPER = "super"
    OTP = "otp"
    LCG = "lcg"


class SuperOrder(str, enum.Enum):
    """Stage order of the super-encryption product cipher."""

    SUB_TRANS = "sub-trans"    # Vigenere first, then Columnar
    TRANS_SUB = "trans-sub"    # Columnar first, then Vigenere


class CipherType(str, enum.Enum):
    """Cipher class suggested by the index of coincidence."""

    MONOALPHABETIC = "Monoalphabetic"       # IC >= 0.06
    MIXED = "Mixed"                         # IC >= 0.045
    POLYALPHABETIC = "Polyalphabetic"       # below


# ===================================================================== #
#  Key Models
# ===================================================================== #


class DoubleKey(BaseModel):
    """Keys for double columnar transposition; ``key2`` defaults to ``key1``."""

    model_config = ConfigDict(frozen=True)

    key1: str
    key2: Optional[str] = None


class SuperKey(BaseModel):
    """Keys and stage order for super encryption."""

    model_config = ConfigDict(frozen=True)

    substitution_key: str
    transposition_key: str
    order: SuperOrder = SuperOrder.SUB_TRANS


class LCGParams(BaseModel):
    """Linear congruential generator parameters.

    ``X(n+1) = (multiplier * X(n) + increment) mod modulus`` starting from
    ``X(0) = seed``.
    """

    model_config = ConfigDict(frozen=True)

    seed: int
    multiplier: int
    increment: int
    modulus: int


class LCGPreset(BaseModel):
    """Named LCG constants from a well-known implementation."""

    model_config = ConfigDict(frozen=True)

    name: str
    multiplier: int
    increment: int
    modulus: int
    description: str

    def with_seed(self, seed: int) -> LCGParams:
        """Bind *seed*.  Multiplier and increment are reduced modulo
        ``modulus``, which leaves the generated sequence unchanged."""
        return LCGParams(
            seed=seed,
            multiplier=self.multiplier % self.modulus,
            increment=self.increment % self.modulus,
            modulus=self.modulus,
        )


# ===================================================================== #
#  Validation and Assessment Models
# ===================================================================== #


class HillKeyValidation(BaseModel):
    """Outcome of checking a Hill key for invertibility mod 26."""

    valid: bool
    message: str
    size: int = 0
    determinant: Optional[int] = None
    determinant_mod26: Optional[int] = None
    determinant_inverse: Optional[int] = None
    inverse: Optional[list[list[int]]] = None


class ParameterValidation(BaseModel):
    """Errors block a transform; warnings are advisory."""

    valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class SecurityAssessment(BaseModel):
    """Qualitative security level of a key configuration (heuristic)."""

    level: str
    score: int = Field(ge=0, le=100)
    issues: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


class KeyReuseCheck(BaseModel):
    """Result of checking whether one pad encrypts several messages."""

    vulnerable: bool
    message_count: int
    severity: Optional[str] = None
    message: str


class GridEfficiency(BaseModel):
    """Share of a columnar grid filled by plaintext rather than filler."""

    original_length: int
    grid_size: int
    padding: int
    padding_percentage: float
    efficiency: float
    column_groups: int
    grade: str          # Excellent (>= 95), Good (>= 85) or Fair


class KeyComparison(BaseModel):
    """Two columnar keywords side by side; equal orders encrypt identically."""

    key1: str
    key2: str
    length1: int
    length2: int
    order1: list[list[int]]
    order2: list[list[int]]
    same_length: bool
    same_order: bool


class MyszkowskiComparison(BaseModel):
    """How Myszkowski grouping changes a keyword's behaviour versus Columnar."""

    keyword: str
    key_length: int
    unique_letters: int
    has_repeated_letters: bool
    repeated_letters: dict[str, int] = Field(default_factory=dict)
    column_groups: int
    behavior: str
    security_note: str


class LayeringComparison(BaseModel):
    """A layered cipher against its single-stage counterpart."""

    single_complexity: int
    layered_complexity: int
    single_security: Optional[SecurityAssessment] = None
    layered_security: Optional[SecurityAssessment] = None
    improvement_percentage: float
    recommendation: str


# ===================================================================== #
#  Visualization Records
# ===================================================================== #


class VisualizationRecord(BaseModel):
    """Common fields of every visualization record."""

    model_config = ConfigDict(frozen=True)

    family: CipherFamilyName
    plaintext: str
    ciphertext: str


class LetterMapping(BaseModel):
    model_config = ConfigDict(frozen=True)

    plain: str
    cipher: str


class ShiftVisualization(VisualizationRecord):
    """Caesar: the plain alphabet aligned with the shifted alphabet."""

    shift: int
    plain_alphabet: str
    cipher_alphabet: str
    mapping: list[LetterMapping]


class KeystreamStep(BaseModel):
    """One position of a keystream cipher."""

    model_config = ConfigDict(frozen=True)

    position: int
    plain_char: str
    key_char: str
    cipher_char: str
    plain_value: int
    key_value: int
    cipher_value: int
    calculation: str
    key_source: Optional[str] = None


class KeystreamVisualization(VisualizationRecord):
    """Vigenere, Beaufort, Autokey and one-time pad."""

    keyword: str
    keystream: str
    steps: list[KeystreamStep]


class OTPVisualization(KeystreamVisualization):
    key_is_random: bool
    security: SecurityAssessment
    plaintext_hex: str
    key_hex: str
    ciphertext_hex: str
    plaintext_binary: str
    key_binary: str
    ciphertext_binary: str


class DigraphStep(BaseModel):
    model_config = ConfigDict(frozen=True)

    plain: str
    cipher: str
    rule: str                           # "row", "column" or "rectangle"
    positions: list[tuple[int, int]]    # (row, col) of both plain letters


class PlayfairVisualization(VisualizationRecord):
    keyword: str
    grid: list[list[str]]
    prepared_text: str
    digraphs: list[DigraphStep]


class HillBlockStep(BaseModel):
    model_config = ConfigDict(frozen=True)

    block: int
    plain_text: str
    plain_vector: list[int]
    cipher_vector: list[int]
    cipher_text: str


class HillVisualization(VisualizationRecord):
    matrix: list[list[int]]
    inverse_matrix: list[list[int]]
    determinant: int
    padded_text: str
    blocks: list[HillBlockStep]


class RailFenceVisualization(VisualizationRecord):
    """Zigzag grid (``""`` for empty cells), rail per position, read order."""

    rails: int
    grid: list[list[str]]
    pattern: list[int]
    reading_order: list[int]


class ColumnRead(BaseModel):
    """One read step: a single column, or a Myszkowski group of columns."""

    model_config = ConfigDict(frozen=True)

    order: int
    columns: list[int]
    key_letters: str
    content: str


class ColumnarVisualization(VisualizationRecord):
    """Columnar and Myszkowski grids."""

    keyword: str
    padded_text: str
    grid: list[list[str]]
    column_groups: list[list[int]]
    reads: list[ColumnRead]


class DoubleVisualization(VisualizationRecord):
    key1: str
    key2: str
    padded_text: str
    first_pass: ColumnarVisualization
    second_pass: ColumnarVisualization


class SuperPass(BaseModel):
    model_config = ConfigDict(frozen=True)

    pass_number: int
    method: str                 # "vigenere" or "columnar"
    method_name: str
    input: str
    output: str
    key: str


class SuperVisualization(VisualizationRecord):
    order: SuperOrder
    passes: list[SuperPass]
    security: SecurityAssessment


class StreamStep(BaseModel):
    """One byte of LCG stream encryption."""

    model_config = ConfigDict(frozen=True)

    position: int
    char: str
    state: int
    plain_byte: int
    key_byte: int
    cipher_byte: int
    plain_binary: str
    key_binary: str
    cipher_binary: str
    calculation: str


class StreamVisualization(VisualizationRecord):
    params: LCGParams
    plaintext_hex: str
    steps: list[StreamStep]
    quality_score: float
    quality_grade: str


# ===================================================================== #
#  Analysis Records
# ===================================================================== #


class NGramCount(BaseModel):
    ngram: str
    count: int
    frequency: float


class TextStatistics(BaseModel):
    """Letter statistics of a ciphertext.

    ``chi_squared`` is Pearson's statistic of the letter counts against
    the uniform distribution; ``chi_squared_normalized`` divides it by the
    text length.  ``english_chi_squared`` compares against English letter
    frequencies (lower means more English-like).
    """

    length: int
    index_of_coincidence: float
    ic_interpretation: str
    classification: CipherType
    chi_squared: float
    chi_squared_p_value: float
    chi_squared_normalized: float
    english_chi_squared: float
    entropy: float
    entropy_percentage: float
    top_letters: list[NGramCount] = Field(default_factory=list)


class AnalysisRecord(BaseModel):
    """Base analysis record.

    When ``sufficient`` is ``False`` every family-specific field keeps its
    default and ``message`` states the minimum length required.
    """

    family: CipherFamilyName
    text_length: int
    sufficient: bool = True
    minimum_length: int = 0
    message: str = ""
    statistics: Optional[TextStatistics] = None
    findings: list[Finding] = Field(default_factory=list)

    @classmethod
    def insufficient(
        cls, family: CipherFamilyName, length: int, minimum: int, unit: str = "letters"
    ) -> AnalysisRecord:
        return cls(
            family=family,
            text_length=length,
            sufficient=False,
            minimum_length=minimum,
            message=f"Insufficient data: need at least {minimum} {unit}, got {length}",
        )


class ShiftCandidate(BaseModel):
    shift: int
    english_chi_squared: float
    preview: str


class CaesarAnalysis(AnalysisRecord):
    candidates: list[ShiftCandidate] = Field(default_factory=list)
    best_shift: Optional[int] = None


class KeyLengthCandidate(BaseModel):
    """Kasiski-style key-length candidate from average subsequence IC."""

    length: int
    average_ic: float
    confidence: float = Field(ge=0.0, le=100.0)
    likely: bool


class PolyalphabeticAnalysis(AnalysisRecord):
    """Vigenere, Beaufort and Autokey."""

    key_lengths: list[KeyLengthCandidate] = Field(default_factory=list)
    best_key_length: Optional[int] = None
    repeated_sequence_lengths: list[int] = Field(default_factory=list)
    is_reciprocal: bool = False


class PolygraphicAnalysis(AnalysisRecord):
    """Playfair and Hill."""

    top_digraphs: list[NGramCount] = Field(default_factory=list)
    block_size: int = 2
    length_fits_blocks: bool = True
    doubled_digraphs: int = 0


class RailCandidate(BaseModel):
    rails: int
    bigram_score: float        # share of adjacent pairs that are common English bigrams
    preview: str


class RailFenceAnalysis(AnalysisRecord):
    candidates: list[RailCandidate] = Field(default_factory=list)


class ColumnCandidate(BaseModel):
    columns: int
    rows: int
    padding: int
    exact_factor: bool
    confidence: str
    repeated_letters: Optional[str] = None   # Myszkowski only: Low / Medium / High


class TranspositionAnalysis(AnalysisRecord):
    """Columnar and Myszkowski key-length candidates."""

    candidates: list[ColumnCandidate] = Field(default_factory=list)


class KeyCombination(BaseModel):
    key1_length: int
    key2_length: int
    complexity: int


class DoubleAnalysis(AnalysisRecord):
    combinations: list[KeyCombination] = Field(default_factory=list)
    security: Optional[SecurityAssessment] = None


class StatisticalAnalysis(AnalysisRecord):
    """Super encryption and one-time pad."""

    ic_interpretation: str = ""
    chi_interpretation: str = ""
    entropy_interpretation: str = ""
    security: Optional[SecurityAssessment] = None


class QualityTest(BaseModel):
    name: str
    passed: bool
    score: float = Field(ge=0.0, le=100.0)
    detail: str


class LCGQualityReport(BaseModel):
    """Heuristic grading of an LCG as a keystream source."""

    params: LCGParams
    sample_size: int
    detected_period: Optional[int] = None
    tests: list[QualityTest]
    overall_score: float
    grade: str
    recommendation: str


class StreamAnalysis(AnalysisRecord):
    byte_entropy: float = 0.0
    byte_entropy_percentage: float = 0.0
    byte_chi_squared: float = 0.0
    quality: Optional[LCGQualityReport] = None


# ===================================================================== #
#  Engine Result
# ===================================================================== #


class TransformResult(BaseModel):
    """Output of an engine encode / decode call plus advisories."""

    family: CipherFamilyName
    operation: str
    output: str
    warnings: list[Finding] = Field(default_factory=list)
    elapsed_seconds: float = 0.0
