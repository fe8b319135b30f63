"""
ClassiCore Analyzers
====================

Cryptanalysis toolkit shared by every cipher family: letter frequency
statistics and key-length search, entropy measures and LCG quality
grading.
"""

from classical.analyzers.entropy import EntropyAnalyzer
from classical.analyzers.frequency import FrequencyAnalyzer
from classical.analyzers.rng_tester import LCGQualityTester

__all__ = [
    "EntropyAnalyzer",
    "FrequencyAnalyzer",
    "LCGQualityTester",
]
