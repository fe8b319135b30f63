"""
ClassiCore Shared Data Models
=============================

Pydantic v2 models for advisory output shared by every cipher family.

Ciphers never raise for weaknesses that do not prevent the transform from
running (a non-random one-time-pad key, a reused pad, a poor LCG); they
report them as :class:`Finding` objects instead.

References:
    - Pydantic v2 documentation. https://docs.pydantic.dev/latest/
    - Shannon, C. E. (1949). Communication Theory of Secrecy Systems.
      Bell System Technical Journal, 28(4), 656-715.
"""

from __future__ import annotations

import json as _json
from enum import Enum
from typing import Any, Iterable

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Severity(str, Enum):
    """Advisory severity level, most severe first."""

    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"
    INFO = "INFO"

    @property
    def rank(self) -> int:
        """0 for CRITICAL up to 4 for INFO."""
        return list(Severity).index(self)


class Finding(BaseModel):
    """A single advisory produced while running a cipher or an analysis.

    Attributes:
        severity:       Qualitative severity rating.
        title:          Short, descriptive title.
        description:    Detailed explanation.
        evidence:       Measured value supporting the advisory.
        recommendation: Suggested action.
    """

    model_config = ConfigDict(
        str_strip_whitespace=True,
        validate_assignment=True,
        extra="ignore",
    )

    severity: Severity = Field(..., description="Severity level of this advisory")
    title: str = Field(..., min_length=1, max_length=256)
    description: str = Field(..., min_length=1)
    evidence: str = Field(default="", description="Supporting measurement")
    recommendation: str = Field(default="")

    @field_validator("evidence", mode="before")
    @classmethod
    def _coerce_evidence(cls, v: Any) -> str:
        """Convert non-string evidence (dict, list, numbers) to a string."""
        if isinstance(v, str):
            return v
        if isinstance(v, (dict, list)):
            return _json.dumps(v, ensure_ascii=False, default=str)
        return str(v)


def highest_severity(findings: Iterable[Finding]) -> Severity | None:
    """The most severe level among *findings*, or ``None`` when empty."""
    levels = [f.severity for f in findings]
    if not levels:
        return None
    return min(levels, key=lambda s: s.rank)
