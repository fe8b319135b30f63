"""
ClassiCore Cipher Families
==========================

One standalone class per family, all satisfying :class:`CipherFamily`.
Columnar and Myszkowski share :class:`ColumnarCipher`; the
``merge_repeats`` flag selects Myszkowski column grouping.
"""

from classical.ciphers.base import CipherFamily
from classical.ciphers.composite import SuperEncryptionCipher
from classical.ciphers.otp import OneTimePadCipher
from classical.ciphers.polygraphic import HillCipher, PlayfairCipher
from classical.ciphers.stream import PRESETS, LCGStreamCipher
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

__all__ = [
    "AutokeyCipher",
    "BeaufortCipher",
    "CaesarCipher",
    "CipherFamily",
    "ColumnarCipher",
    "DoubleTranspositionCipher",
    "HillCipher",
    "LCGStreamCipher",
    "OneTimePadCipher",
    "PRESETS",
    "PlayfairCipher",
    "RailFenceCipher",
    "SuperEncryptionCipher",
    "VigenereCipher",
]
