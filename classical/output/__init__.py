"""
ClassiCore Output Module
========================

Rich console display for cipher results, visualizations and analyses.
"""

from classical.output.console import ClassiConsoleOutput

__all__ = ["ClassiConsoleOutput"]
