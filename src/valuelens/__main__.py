"""
Main entry point for valuelens when run as a module.

Allows execution via: python -m valuelens

valuelens/src/valuelens/__main__.py
"""

from .cli import main

if __name__ == "__main__":
    main()
