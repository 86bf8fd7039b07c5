"""Shared Pydantic models for detection results."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, model_validator

ProjectType = Literal["rust_sdk", "python_sdk", "mcp_server", "mixed", "none"]

ConfigType = Literal[
    "environment",
    "build_descriptor",
    "requirements",
    "language_build",
    "json",
    "yaml",
    "toml",
    "mcp_config",
    "unknown",
]

FileType = Literal["rust", "python", "config", "documentation", "environment", "build", "unknown"]


class ProjectInfo(BaseModel):
    """Classification of a single directory.

    Attributes
    ----------
    project_type: ProjectType
        Verdict of the decision table ("none" when no SDK signal was found).
    root_path: Path
        Directory that was classified, as given by the caller.
    has_build_descriptor: bool
        ``Cargo.toml`` present directly under the root.
    has_requirements_manifest: bool
        ``requirements.txt`` present directly under the root.
    has_build_script: bool
        ``setup.py`` present; informational, does not affect the verdict.
    has_sdk_dependencies: bool
        A known SDK dependency fragment appears in a manifest.
    has_sdk_config: bool
        A known config file carries an SDK marker, or an SDK directory exists.
    estimated_size: int
        Bytes under the root, excluding build/cache dirs. Walk stops once the
        cap is exceeded, so large trees are undercounted.
    sdk_version: str | None
        First version extracted from a manifest.
    """

    project_type: ProjectType = "none"
    root_path: Path
    has_build_descriptor: bool = False
    has_requirements_manifest: bool = False
    has_build_script: bool = False
    has_sdk_dependencies: bool = False
    has_sdk_config: bool = False
    estimated_size: int = 0
    sdk_version: str | None = None


class ConfigFileInfo(BaseModel):
    path: Path
    config_type: ConfigType = "unknown"
    contains_sdk_settings: bool = False
    # "<category>:<marker>" in discovery order
    detected_settings: list[str] = Field(default_factory=list)


class ConfigInfo(BaseModel):
    config_files: list[ConfigFileInfo] = Field(default_factory=list)
    has_sdk_config: bool = False
    sdk_version: str | None = None
    primary_api_configured: bool = False
    secondary_api_configured: bool = False
    mcp_server_configured: bool = False
    environment_variables: dict[str, str] = Field(default_factory=dict)


class FileValidationResult(BaseModel):
    path: Path
    is_valid: bool
    file_size: int = 0
    file_type: FileType = "unknown"
    reason: str | None = None

    @model_validator(mode="after")
    def _reason_matches_verdict(self) -> FileValidationResult:
        if self.is_valid and self.reason is not None:
            raise ValueError("a valid result cannot carry a rejection reason")
        if not self.is_valid and not self.reason:
            raise ValueError("an invalid result needs a rejection reason")
        return self


class FileStatistics(BaseModel):
    total_files: int = 0
    valid_files: int = 0
    invalid_files: int = 0
    total_size: int = 0
    valid_size: int = 0
    rust_files: int = 0
    python_files: int = 0
    config_files: int = 0
    doc_files: int = 0
    env_files: int = 0
    build_files: int = 0
    unknown_files: int = 0

    @property
    def valid_percentage(self) -> float:
        if self.total_files == 0:
            return 0.0
        return self.valid_files / self.total_files * 100.0

    @property
    def average_file_size(self) -> int:
        if self.total_files == 0:
            return 0
        return self.total_size // self.total_files
