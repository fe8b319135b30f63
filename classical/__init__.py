"""
ClassiCore -- Classical Cipher Lab
==================================

Classical cipher algorithms for teaching cryptography, together with the
cryptanalysis tools used to break them.

Modules:
    - classical.core.normalize: Text and key normalisation
    - classical.core.modmath: Modular arithmetic and mod-26 matrices
    - classical.core.engine: Family registry and dispatch facade
    - classical.core.models: Pydantic key, visualization and analysis models
    - classical.ciphers: Substitution, polygraphic, transposition,
      composite, one-time-pad and LCG stream ciphers
    - classical.analyzers: Frequency, entropy and RNG quality analysis
    - classical.output: Rich console rendering
    - classical.cli: Click-based command-line interface

References:
    - Kahn, D. (1996). The Codebreakers. Scribner.
    - Friedman, W. F. (1922). The Index of Coincidence and Its
      Applications in Cryptography. Riverbank Publication No. 22.
"""

__version__ = "1.0.0"
__tool_name__ = "classicore"
