"""File admission rules for downstream processing (e.g. code review).

Checks run in a fixed order and the first failure wins:
existence -> regular file -> excluded pattern -> min size -> max size -> type.

Exclusion patterns use a coarse glob emulation, not real globbing:
- ``dir/**``: the prefix before ``**`` appears anywhere in the path;
- ``*.ext``: the path ends with ``.ext``;
- anything else: plain substring.
"""

from __future__ import annotations

import os
import stat
from collections.abc import Iterable, Sequence
from pathlib import Path

from adk_inspector.detect.markers import BUILD_DESCRIPTOR, BUILD_SCRIPT, REQUIREMENTS_MANIFEST
from adk_inspector.errors import FileValidationError
from adk_inspector.logging import get_logger
from adk_inspector.settings import MIB, DetectionConfig
from adk_inspector.types import FileStatistics, FileType, FileValidationResult

log = get_logger(__name__)

KIB = 1024
REVIEW_SIZE_LIMIT = 100 * KIB

DEFAULT_EXTENSIONS = ("rs", "py", "pyi", "toml", "json", "yaml", "yml", "md", "rst", "txt")
DEFAULT_EXCLUDES = (
    "target/**",
    "build/**",
    "dist/**",
    "node_modules/**",
    ".venv/**",
    "__pycache__/**",
    ".git/**",
    ".svn/**",
    ".vscode/**",
    ".idea/**",
    "*.tmp",
    "*.temp",
    "*.log",
    "*.bak",
)

# Accepted regardless of the extension allow-list
ALWAYS_ALLOWED = {BUILD_DESCRIPTOR, REQUIREMENTS_MANIFEST, BUILD_SCRIPT, ".env", ".env.template"}

_NAME_TYPES: dict[str, FileType] = {
    BUILD_DESCRIPTOR: "build",
    "Cargo.lock": "build",
    REQUIREMENTS_MANIFEST: "build",
    BUILD_SCRIPT: "build",
    "pyproject.toml": "build",
    ".env": "environment",
    ".env.template": "environment",
    ".env.local": "environment",
    ".env.production": "environment",
    ".env.development": "environment",
    "README.md": "documentation",
    "CHANGELOG.md": "documentation",
    "LICENSE": "documentation",
    "CONTRIBUTING.md": "documentation",
}
_EXTENSION_TYPES: dict[str, FileType] = {
    "rs": "rust",
    "py": "python",
    "pyi": "python",
    "toml": "config",
    "json": "config",
    "yaml": "config",
    "yml": "config",
    "md": "documentation",
    "rst": "documentation",
    "txt": "documentation",
}
_STAT_FIELDS: dict[FileType, str] = {
    "rust": "rust_files",
    "python": "python_files",
    "config": "config_files",
    "documentation": "doc_files",
    "environment": "env_files",
    "build": "build_files",
    "unknown": "unknown_files",
}


def file_type_for(path: Path) -> FileType:
    if path.name in _NAME_TYPES:
        return _NAME_TYPES[path.name]
    return _EXTENSION_TYPES.get(path.suffix[1:].lower(), "unknown")


def matches_pattern(path: str, pattern: str) -> bool:
    if "**" in pattern:
        return pattern.split("**", 1)[0] in path
    if pattern.startswith("*."):
        return path.endswith(pattern[1:])
    return pattern in path


def format_file_size(size: int) -> str:
    """Render *size* with 1024-based units: ``1536`` -> ``"1.5 KB"``."""
    units = ("B", "KB", "MB", "GB")
    value = float(size)
    index = 0
    while value >= 1024 and index < len(units) - 1:
        value /= 1024
        index += 1
    if index == 0:
        return f"{size} B"
    return f"{value:.1f} {units[index]}"


class FileValidator:
    def __init__(
        self,
        max_file_size: int = 50 * MIB,
        min_file_size: int = 1,
        allowed_extensions: Iterable[str] | None = None,
        excluded_patterns: Iterable[str] | None = None,
    ) -> None:
        self.max_file_size = max_file_size
        self.min_file_size = min_file_size
        self.allowed_extensions = tuple(
            DEFAULT_EXTENSIONS if allowed_extensions is None else allowed_extensions
        )
        self.excluded_patterns = tuple(
            DEFAULT_EXCLUDES if excluded_patterns is None else excluded_patterns
        )

    # --- Presets ------------------------------------------------------------------

    @classmethod
    def default(cls) -> FileValidator:
        return cls()

    @classmethod
    def for_code_review(cls) -> FileValidator:
        return cls(max_file_size=1 * MIB, min_file_size=10, allowed_extensions=("rs", "py"))

    @classmethod
    def for_config_files(cls) -> FileValidator:
        return cls(
            max_file_size=10 * KIB,
            min_file_size=1,
            allowed_extensions=("toml", "json", "yaml", "yml"),
        )

    @classmethod
    def from_config(cls, config: DetectionConfig) -> FileValidator:
        return cls(max_file_size=config.max_file_size, min_file_size=config.min_file_size)

    # --- Single file --------------------------------------------------------------

    def validate_file(self, path: Path | str) -> FileValidationResult:
        """Validate one path. Missing paths yield a negative result, not an error.

        Raises FileValidationError if an existing path cannot be stat'ed.
        """
        path = Path(path)
        if not os.path.lexists(path):
            return FileValidationResult(path=path, is_valid=False, reason="File does not exist")
        try:
            st = os.stat(path)
        except FileNotFoundError:
            # Dangling symlink
            return FileValidationResult(path=path, is_valid=False, reason="File does not exist")
        except OSError as exc:
            raise FileValidationError(f"Failed to get metadata for {path}: {exc}") from exc
        if not stat.S_ISREG(st.st_mode):
            return FileValidationResult(path=path, is_valid=False, reason="Path is not a file")

        size = st.st_size
        file_type = file_type_for(path)

        def reject(reason: str) -> FileValidationResult:
            return FileValidationResult(
                path=path, is_valid=False, file_size=size, file_type=file_type, reason=reason
            )

        if self.is_excluded(path):
            return reject("File matches excluded pattern")
        if size < self.min_file_size:
            return reject(f"File too small: {size} bytes")
        if size > self.max_file_size:
            return reject(f"File too large: {size} bytes (max: {self.max_file_size})")
        if not self.is_allowed_type(path):
            return reject("File type not allowed")
        return FileValidationResult(path=path, is_valid=True, file_size=size, file_type=file_type)

    def is_excluded(self, path: Path) -> bool:
        text = path.as_posix()
        return any(matches_pattern(text, p) for p in self.excluded_patterns)

    def is_allowed_type(self, path: Path) -> bool:
        if path.name in ALWAYS_ALLOWED:
            return True
        ext = path.suffix[1:].lower()
        return bool(ext) and ext in self.allowed_extensions

    def is_suitable_for_review(self, path: Path | str) -> bool:
        """Valid source file no larger than 100 KiB."""
        result = self.validate_file(path)
        if not result.is_valid:
            return False
        return result.file_type in ("rust", "python") and result.file_size <= REVIEW_SIZE_LIMIT

    # --- Collections --------------------------------------------------------------

    def validate_files(self, paths: Iterable[Path | str]) -> list[FileValidationResult]:
        results: list[FileValidationResult] = []
        for p in paths:
            try:
                results.append(self.validate_file(p))
            except Exception as exc:  # one bad path must not abort the batch
                log.warning("validation failed for %s: %s", p, exc)
                results.append(
                    FileValidationResult(
                        path=Path(p), is_valid=False, reason=f"Validation error: {exc}"
                    )
                )
        return results

    @staticmethod
    def valid_files(results: Sequence[FileValidationResult]) -> list[FileValidationResult]:
        return [r for r in results if r.is_valid]

    @staticmethod
    def invalid_files(results: Sequence[FileValidationResult]) -> list[FileValidationResult]:
        return [r for r in results if not r.is_valid]

    @staticmethod
    def statistics(results: Iterable[FileValidationResult]) -> FileStatistics:
        counts: dict[str, int] = dict.fromkeys(FileStatistics.model_fields, 0)
        for r in results:
            counts["total_files"] += 1
            counts["total_size"] += r.file_size
            if r.is_valid:
                counts["valid_files"] += 1
                counts["valid_size"] += r.file_size
            else:
                counts["invalid_files"] += 1
            counts[_STAT_FIELDS[r.file_type]] += 1
        return FileStatistics(**counts)
