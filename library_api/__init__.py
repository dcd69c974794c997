"""
Top-level package for the Library API.

All functionality lives in submodules under ``app``; this package has
no public exports of its own.
"""

__all__ = []
