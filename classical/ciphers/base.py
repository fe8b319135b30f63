"""
Cipher Family Contract
======================

Every family is a standalone class exposing the same four operations.
They share no base implementation; the protocol only fixes the shape the
engine and the CLI rely on.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol, runtime_checkable

from classical.core.models import AnalysisRecord, CipherFamilyName, VisualizationRecord


@runtime_checkable
class CipherFamily(Protocol):
    """Structural type of a cipher family.

    ``encode`` / ``decode`` raise :class:`classical.core.errors.CipherError`
    subclasses for unusable input.  ``visualize`` returns ``None`` for text
    with no usable characters.  ``analyze`` never raises for short input;
    it returns a record with ``sufficient=False`` instead.
    """

    name: CipherFamilyName

    def encode(self, text: str, key: Any) -> str: ...

    def decode(self, ciphertext: str, key: Any) -> str: ...

    def visualize(self, text: str, key: Any) -> Optional[VisualizationRecord]: ...

    def analyze(self, ciphertext: str, key: Any = None) -> AnalysisRecord: ...
