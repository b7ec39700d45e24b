"""Interfaces module for Tessera.

External interfaces to the prompt engine:
- CLI for previewing registry fixtures
"""

__all__ = []
