"""Telemetry and observability helpers.

This package emits run events for deterministic operator diagnostics.
"""

from .logger import RunLogger

__all__ = ["RunLogger"]
