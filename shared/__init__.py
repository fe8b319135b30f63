"""
ClassiCore Shared Module
========================

Configuration, logging, console and advisory models shared by the
ClassiCore cipher lab.
"""

from shared.config import ClassiConfig, get_config

__all__ = ["ClassiConfig", "get_config"]
