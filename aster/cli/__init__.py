"""Aster CLI."""

from .main import cli, main

__all__ = ["cli", "main"]
