"""Errors raised at the analysis entry boundary.

Analyzer stages themselves never raise for heuristic misses.
"""

from __future__ import annotations


class ScreenSightError(Exception):
    """Base class for analysis errors."""

    kind = "analysis_error"


class DecodeError(ScreenSightError):
    """The source image could not be decoded (or no buffer was supplied)."""

    kind = "decode_error"


class InvalidBufferError(ScreenSightError):
    """The pixel buffer is malformed: empty dimensions or mismatched data."""

    kind = "invalid_buffer"
