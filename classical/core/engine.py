"""
Cipher Engine
=============

Central dispatcher for the ClassiCore cipher lab.  The CipherEngine holds
the closed registry of cipher families, built once from configuration,
and routes encode / decode / visualize / analyze calls to them by family
tag.  Each call is timed and logged; advisory findings (a non-random pad,
a weak LCG) are attached to the result rather than raised.

The families never read configuration or log on their own.  The engine
passes every threshold to them as constructor arguments.

Architecture follows the Facade pattern (Gamma et al., 1994), providing
a single entry point over the individual family classes.

References:
    - Gamma, E., Helm, R., Johnson, R., & Vlissides, J. (1994).
      Design Patterns: Elements of Reusable Object-Oriented Software.
      Addison-Wesley.
"""

from __future__ import annotations

import re
from types import MappingProxyType
from typing import Any, Mapping, Optional

from shared.config import ClassiConfig
from shared.logger import ClassiLogger
from shared.models import Finding

from classical.analyzers.entropy import EntropyAnalyzer
from classical.analyzers.frequency import FrequencyAnalyzer
from classical.analyzers.rng_tester import LCGQualityTester
from classical.ciphers.base import CipherFamily
from classical.ciphers.composite import SuperEncryptionCipher
from classical.ciphers.otp import (
    OneTimePadCipher,
    generate_random_key,
    text_to_binary,
    text_to_hex,
)
from classical.ciphers.polygraphic import HillCipher, PlayfairCipher, parse_matrix_key
from classical.ciphers.stream import PRESETS, LCGStreamCipher, generate_random_seed
from classical.ciphers.substitution import (
    AutokeyCipher,
    BeaufortCipher,
    CaesarCipher,
    VigenereCipher,
)
from classical.ciphers.transposition import (
    ColumnarCipher,
    DoubleTranspositionCipher,
    RailFenceCipher,
)
from classical.core.errors import CipherError, InputValidationError, KeyShapeError
from classical.core.models import (
    AnalysisRecord,
    CipherFamilyName,
    DoubleKey,
    LCGParams,
    LCGPreset,
    SuperKey,
    SuperOrder,
    TransformResult,
    VisualizationRecord,
)

_KEYWORD_FAMILIES = frozenset({
    CipherFamilyName.VIGENERE,
    CipherFamilyName.BEAUFORT,
    CipherFamilyName.AUTOKEY,
    CipherFamilyName.PLAYFAIR,
    CipherFamilyName.COLUMNAR,
    CipherFamilyName.MYSZKOWSKI,
    CipherFamilyName.OTP,
})

KEY_FORMATS = ("text", "hex", "binary")


class CipherEngine:
    """Dispatches every cipher operation by family tag.

    Usage::

        engine = CipherEngine()
        result = engine.encode("vigenere", "ATTACK AT DAWN", "LEMON")
        result.output            # 'LXFOPVEFRNHR'
        key = engine.parse_key("hill", "3,3,2,5")
        engine.visualize("hill", "HELP", key)

    Attributes:
        config: ClassiCore configuration instance.
        logger: Logger for the engine.
    """

    def __init__(
        self,
        config: Optional[ClassiConfig] = None,
        logger: Optional[ClassiLogger] = None,
    ) -> None:
        self.config = config or ClassiConfig()
        settings = self.config.global_settings
        self.logger = logger or ClassiLogger(
            "engine",
            log_level="DEBUG" if settings.debug else settings.log_level,
            log_file=settings.log_file or None,
            json_logs=settings.log_json,
        )

        analysis = self.config.analysis
        stream = self.config.stream
        self._frequency = FrequencyAnalyzer(
            english_ic=analysis.english_ic,
            random_ic=analysis.random_ic,
            reference_ic=analysis.reference_ic,
            max_key_length=analysis.kasiski_max_key_length,
            top_n=analysis.kasiski_top_n,
        )
        self._entropy = EntropyAnalyzer()
        self._tester = LCGQualityTester(
            period_search_limit=stream.period_search_limit,
            full_period_max_modulus=stream.full_period_max_modulus,
        )
        self._registry: Mapping[CipherFamilyName, CipherFamily] = MappingProxyType(
            self._build_registry()
        )

    def _build_registry(self) -> dict[CipherFamilyName, CipherFamily]:
        ciphers = self.config.ciphers
        freq = self._frequency
        sub_min = ciphers.min_substitution_key_length
        trans_min = ciphers.min_transposition_key_length

        families: list[CipherFamily] = [
            CaesarCipher(analyzer=freq),
            VigenereCipher(min_key_length=sub_min, analyzer=freq),
            BeaufortCipher(min_key_length=sub_min, analyzer=freq),
            AutokeyCipher(min_key_length=sub_min, analyzer=freq),
            PlayfairCipher(
                filler=ciphers.filler,
                alt_filler=ciphers.alt_filler,
                analyzer=freq,
            ),
            HillCipher(filler=ciphers.filler, analyzer=freq),
            RailFenceCipher(analyzer=freq),
            ColumnarCipher(filler=ciphers.filler, min_key_length=trans_min, analyzer=freq),
            ColumnarCipher(
                merge_repeats=True,
                filler=ciphers.filler,
                min_key_length=trans_min,
                analyzer=freq,
            ),
            DoubleTranspositionCipher(
                filler=ciphers.filler, min_key_length=trans_min, analyzer=freq
            ),
            SuperEncryptionCipher(
                filler=ciphers.filler,
                min_substitution_key_length=sub_min,
                min_transposition_key_length=trans_min,
                analyzer=freq,
                entropy=self._entropy,
            ),
            OneTimePadCipher(
                random_threshold=self.config.analysis.otp_random_threshold,
                analyzer=freq,
                entropy=self._entropy,
            ),
            LCGStreamCipher(
                tester=self._tester,
                entropy=self._entropy,
                low_quality_score=self.config.stream.low_quality_score,
            ),
        ]
        return {family.name: family for family in families}

    # ------------------------------------------------------------------ #
    #  Registry
    # ------------------------------------------------------------------ #

    def families(self) -> list[CipherFamilyName]:
        """Every registered family tag, in registration order."""
        return list(self._registry)

    def family(self, name: CipherFamilyName | str) -> CipherFamily:
        """Look up a family by tag (``"rail-fence"`` and ``"RAIL_FENCE"`` both work).

        Raises:
            InputValidationError: Unknown family name.
        """
        try:
            tag = CipherFamilyName(str(getattr(name, "value", name)).strip().lower().replace("-", "_"))
        except ValueError:
            known = ", ".join(f.value for f in self._registry)
            raise InputValidationError(
                f"unknown cipher family {name!r}; expected one of: {known}"
            ) from None
        return self._registry[tag]

    @staticmethod
    def presets() -> Mapping[str, LCGPreset]:
        return PRESETS

    # ------------------------------------------------------------------ #
    #  Operations
    # ------------------------------------------------------------------ #

    def encode(self, family: CipherFamilyName | str, text: str, key: Any) -> TransformResult:
        return self._transform("encode", family, text, key)

    def decode(self, family: CipherFamilyName | str, ciphertext: str, key: Any) -> TransformResult:
        return self._transform("decode", family, ciphertext, key)

    def _transform(
        self, operation: str, family: CipherFamilyName | str, text: str, key: Any
    ) -> TransformResult:
        cipher = self.family(family)
        tag = cipher.name.value
        with self.logger.operation(operation, family=tag):
            with self.logger.timed(f"{operation} {tag}") as timer:
                try:
                    output = getattr(cipher, operation)(text, key)
                except CipherError as exc:
                    self.logger.warning(
                        "%s failed: %s", operation, exc, error=type(exc).__name__
                    )
                    raise
            warnings = self._advisories(cipher, text, key)
            self.logger.info(
                "%s complete", operation,
                input_length=len(text), output_length=len(output), warnings=len(warnings),
            )
        return TransformResult(
            family=cipher.name,
            operation=operation,
            output=output,
            warnings=warnings,
            elapsed_seconds=round(timer.elapsed, 6),
        )

    def visualize(
        self, family: CipherFamilyName | str, text: str, key: Any
    ) -> Optional[VisualizationRecord]:
        """Step-by-step record of encoding *text*; ``None`` for empty text."""
        cipher = self.family(family)
        with self.logger.operation("visualize", family=cipher.name.value):
            try:
                record = cipher.visualize(text, key)
            except CipherError as exc:
                self.logger.warning("visualize failed: %s", exc, error=type(exc).__name__)
                raise
            if record is None:
                self.logger.info("Nothing to visualize: no usable characters")
        return record

    def analyze(
        self, family: CipherFamilyName | str, ciphertext: str, key: Any = None
    ) -> AnalysisRecord:
        """Cryptanalysis record for *ciphertext*, with advisories when a key is given."""
        cipher = self.family(family)
        with self.logger.operation("analyze", family=cipher.name.value):
            with self.logger.timed(f"analyze {cipher.name.value}"):
                try:
                    record = cipher.analyze(ciphertext, key)
                except CipherError as exc:
                    self.logger.warning("analyze failed: %s", exc, error=type(exc).__name__)
                    raise
            if not record.sufficient:
                self.logger.info(record.message)
                return record
            if key is not None:
                findings = self._advisories(cipher, ciphertext, key)
                if findings:
                    record = record.model_copy(update={"findings": [*record.findings, *findings]})
        return record

    def _advisories(self, cipher: CipherFamily, text: str, key: Any) -> list[Finding]:
        if isinstance(cipher, OneTimePadCipher):
            return cipher.advisories(text, key)
        if isinstance(cipher, LCGStreamCipher):
            return cipher.advisories(key)
        return []

    # ------------------------------------------------------------------ #
    #  Key material
    # ------------------------------------------------------------------ #

    def parse_key(
        self,
        family: CipherFamilyName | str,
        raw: Optional[str],
        *,
        key2: Optional[str] = None,
        order: Optional[str] = None,
        preset: Optional[str] = None,
        seed: Optional[int] = None,
    ) -> Any:
        """Turn command-line strings into the key material *family* expects.

        ``lcg`` accepts ``seed,multiplier,increment,modulus`` in *raw*, or a
        preset name with an optional seed (random when omitted).

        Raises:
            KeyShapeError: Missing or malformed key.
        """
        tag = self.family(family).name

        if tag is CipherFamilyName.LCG:
            return self._parse_lcg_key(raw, preset, seed)
        if raw is None or not raw.strip():
            raise KeyShapeError(f"{tag.value} requires --key")

        if tag in _KEYWORD_FAMILIES:
            return raw
        if tag is CipherFamilyName.CAESAR:
            return CaesarCipher.coerce_shift(raw)
        if tag is CipherFamilyName.RAIL_FENCE:
            return RailFenceCipher.coerce_rails(raw)
        if tag is CipherFamilyName.HILL:
            return parse_matrix_key(raw)
        if tag is CipherFamilyName.DOUBLE:
            return DoubleKey(key1=raw, key2=key2)
        # super
        if not key2:
            raise KeyShapeError("super encryption requires --key2 (transposition key)")
        try:
            stage_order = SuperOrder(order) if order else SuperOrder.SUB_TRANS
        except ValueError:
            raise KeyShapeError(
                f"order must be 'sub-trans' or 'trans-sub', got {order!r}"
            ) from None
        return SuperKey(substitution_key=raw, transposition_key=key2, order=stage_order)

    def _parse_lcg_key(
        self, raw: Optional[str], preset: Optional[str], seed: Optional[int]
    ) -> LCGParams:
        if raw and raw.strip() and not preset:
            parts = [p for p in re.split(r"[,\s]+", raw.strip()) if p]
            try:
                values = [int(p) for p in parts]
            except ValueError:
                raise KeyShapeError(f"LCG key must be integers, got {raw!r}") from None
            if len(values) == 4:
                return LCGParams(
                    seed=values[0], multiplier=values[1], increment=values[2], modulus=values[3]
                )
            if len(values) == 1 and seed is None:
                seed = values[0]
            else:
                raise KeyShapeError(
                    "LCG key must be 'seed,multiplier,increment,modulus' or a single seed"
                )

        name = (preset or self.config.stream.default_preset).strip().upper()
        if name not in PRESETS:
            raise KeyShapeError(
                f"unknown LCG preset {name!r}; expected one of: {', '.join(PRESETS)}"
            )
        chosen = PRESETS[name]
        if seed is None:
            seed = generate_random_seed(chosen.modulus)
            self.logger.debug("Generated random seed", preset=name)
        return chosen.with_seed(seed)

    @staticmethod
    def generate_key(length: int, fmt: str = "text") -> str:
        """Random pad key of *length* letters as text, hex or binary."""
        if fmt not in KEY_FORMATS:
            raise InputValidationError(f"format must be one of {', '.join(KEY_FORMATS)}")
        key = generate_random_key(length)
        if fmt == "hex":
            return text_to_hex(key)
        if fmt == "binary":
            return text_to_binary(key)
        return key
