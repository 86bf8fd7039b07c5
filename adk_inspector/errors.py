"""Typed failures raised by the detection engine."""

from __future__ import annotations


class DetectionError(Exception):
    pass


class ProjectScanError(DetectionError):
    """The project root (or a file the classifier must stat) cannot be read."""


class ConfigScanError(DetectionError):
    """The configuration scan root is missing or not a directory."""


class FileValidationError(DetectionError):
    """Metadata for an existing path could not be read."""
