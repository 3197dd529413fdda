"""Command-line interface module for the streaming SGML generator.

This module provides the sgml-render tool for rendering and checking JSON
document descriptions.
"""

from .main import main

__all__ = ["main"]
