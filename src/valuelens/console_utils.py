"""
Shared console utilities for valuelens.

Provides a centralized Rich Console instance to avoid duplication.

valuelens/src/valuelens/console_utils.py
"""

from rich.console import Console

__all__ = ["console"]

# Global console instance used by the CLI
console = Console()
