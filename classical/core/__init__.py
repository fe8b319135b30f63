"""
ClassiCore Core Module
======================

Error taxonomy, text normalisation, mod-26 arithmetic and the data
models shared by every cipher family.  The dispatch facade lives in
:mod:`classical.core.engine` and is imported from there directly, since
it depends on the cipher families which in turn depend on this package.
"""

from classical.core.errors import (
    CipherError,
    CipherFormatError,
    InputValidationError,
    KeyShapeError,
    KeyTooShortError,
)
from classical.core.models import (
    CipherFamilyName,
    DoubleKey,
    LCGParams,
    SuperKey,
    SuperOrder,
    TransformResult,
)

__all__ = [
    "CipherError",
    "CipherFamilyName",
    "CipherFormatError",
    "DoubleKey",
    "InputValidationError",
    "KeyShapeError",
    "KeyTooShortError",
    "LCGParams",
    "SuperKey",
    "SuperOrder",
    "TransformResult",
]
