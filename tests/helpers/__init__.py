"""Test helper modules for mounter testing.

This package provides an in-memory engine recording the calls made by the
push and pull engines.
"""

from .fake_engine import FakeEngine

__all__ = [
    'FakeEngine',
]
