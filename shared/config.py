"""
ClassiCore Configuration Management
===================================

Centralized configuration for the ClassiCore cipher lab using Python
dataclasses and TOML-based persistence.

Every tunable threshold used by the ciphers and the cryptanalysis toolkit
lives here.  The cipher classes never read configuration themselves; the
engine passes these values to them as explicit constructor arguments.

References:
    - PEP 681 -- Data Class Transforms (2022).
    - TOML v1.0.0 Specification. https://toml.io/en/v1.0.0
    - Friedman, W. F. (1922). The Index of Coincidence and Its
      Applications in Cryptography. Riverbank Publication No. 22.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib  # type: ignore[no-redef]


# ---------------------------------------------------------------------------
# Default configuration file path relative to the project root
# ---------------------------------------------------------------------------
_DEFAULT_CONFIG_PATH: Path = Path(__file__).resolve().parent.parent / "classicore.toml"


# ============================ Section Configs ==============================


@dataclass(frozen=False, slots=True)
class CipherConfig:
    """Settings shared by the cipher families.

    ``filler`` pads Hill blocks, transposition grids and Playfair digraphs;
    ``alt_filler`` replaces it in Playfair when the letter being separated
    is the filler itself.
    """

    filler: str = "X"
    alt_filler: str = "Q"
    min_substitution_key_length: int = 3
    min_transposition_key_length: int = 2


@dataclass(frozen=False, slots=True)
class AnalysisConfig:
    """Parameters for the cryptanalysis toolkit.

    Reference:
        Friedman, W. F. (1922). The Index of Coincidence and Its
        Applications in Cryptography.
    """

    english_ic: float = 0.067
    random_ic: float = 0.038
    reference_ic: float = 0.065
    kasiski_max_key_length: int = 20
    kasiski_top_n: int = 5
    otp_random_threshold: float = 40.0


@dataclass(frozen=False, slots=True)
class StreamConfig:
    """Parameters for the LCG stream cipher and its quality tests.

    Reference:
        Knuth, D. E. (1997). The Art of Computer Programming, Vol. 2:
        Seminumerical Algorithms, 3rd ed., Section 3.2.1.
    """

    default_preset: str = "NUMERICAL_RECIPES"
    period_search_limit: int = 1000
    full_period_max_modulus: int = 1000
    low_quality_score: float = 60.0


# =========================== Global Settings ===============================


@dataclass(frozen=False, slots=True)
class GlobalConfig:
    """Global settings: logging verbosity and output format."""

    log_level: str = "WARNING"
    log_file: str = ""
    log_json: bool = False
    output_format: str = "console"
    debug: bool = False
    version: str = "1.0.0"


# =========================== Master Config =================================


@dataclass(frozen=False, slots=True)
class ClassiConfig:
    """Master configuration aggregating every section.

    Usage:
        >>> config = ClassiConfig.load()                   # from default path
        >>> config = ClassiConfig.load("custom.toml")      # from custom path
        >>> config.ciphers.filler
        'X'
    """

    global_settings: GlobalConfig = field(default_factory=GlobalConfig)
    ciphers: CipherConfig = field(default_factory=CipherConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    stream: StreamConfig = field(default_factory=StreamConfig)

    @classmethod
    def load(cls, path: str | Path | None = None) -> ClassiConfig:
        """Load configuration from a TOML file.

        If *path* is ``None`` the loader looks for ``classicore.toml`` in the
        project root.  Missing keys fall back to dataclass defaults.

        Args:
            path: Filesystem path to a TOML configuration file.

        Returns:
            A fully-populated :class:`ClassiConfig` instance.

        Raises:
            FileNotFoundError: If the specified path does not exist
                *and* was explicitly provided by the caller.
        """
        config_path = Path(path) if path is not None else _DEFAULT_CONFIG_PATH

        if not config_path.exists():
            if path is not None:
                raise FileNotFoundError(
                    f"Configuration file not found: {config_path}"
                )
            return cls()

        with open(config_path, "rb") as fh:
            raw: dict[str, Any] = tomllib.load(fh)

        return cls(
            global_settings=cls._build_section(GlobalConfig, raw.get("global", {})),
            ciphers=cls._build_section(CipherConfig, raw.get("ciphers", {})),
            analysis=cls._build_section(AnalysisConfig, raw.get("analysis", {})),
            stream=cls._build_section(StreamConfig, raw.get("stream", {})),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialise the entire configuration tree to a plain dictionary."""
        return asdict(self)

    @staticmethod
    def _build_section(cls: type, data: dict[str, Any]) -> Any:
        """Instantiate a dataclass *cls* using only the keys it declares.

        Unknown keys in the TOML source are ignored.
        """
        valid_keys = {f.name for f in cls.__dataclass_fields__.values()}  # type: ignore[attr-defined]
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        return cls(**filtered)


def get_config(path: str | Path | None = None) -> ClassiConfig:
    """Module-level convenience wrapper around :meth:`ClassiConfig.load`.

    Caches the result so that repeated calls share one instance.
    """
    if not hasattr(get_config, "_cached") or path is not None:
        get_config._cached = ClassiConfig.load(path)  # type: ignore[attr-defined]
    return get_config._cached  # type: ignore[attr-defined]
