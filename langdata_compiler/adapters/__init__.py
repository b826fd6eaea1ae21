"""
Adapters module - I/O surfaces.

Adapters are thin wrappers that forward to the builder and the container.
They do no compiling of their own.
"""

from langdata_compiler.adapters.cli import main

__all__ = [
    "main",
]
