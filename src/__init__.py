# src/__init__.py — v1
"""agrosight — AI insight request orchestrator for farm dashboards."""

from agrosight.version import __version__

__all__ = ["__version__"]
