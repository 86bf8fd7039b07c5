"""ADK project classifier and bounded project finder.

Heuristics:
- ``Cargo.toml`` / ``requirements.txt`` are scanned for known ADK dependency
  name fragments (substring match, no TOML/pip parsing).
- A handful of well-known config files are checked for SDK markers, and a few
  SDK-flavoured directory names count as config signals too.
- The verdict comes from a decision table over which manifests exist; see
  ``_classify``.

Walks use explicit stacks and never follow symlinks.
"""

from __future__ import annotations

import os
from collections.abc import Iterable
from pathlib import Path

from adk_inspector.detect.base import (
    contains_any,
    extract_pinned_requirement,
    extract_version,
    read_text,
)
from adk_inspector.detect.markers import (
    BUILD_DESCRIPTOR,
    BUILD_SCRIPT,
    REQUIREMENTS_MANIFEST,
    ProjectMarkers,
)
from adk_inspector.errors import ProjectScanError
from adk_inspector.logging import get_logger
from adk_inspector.settings import DetectionConfig
from adk_inspector.types import ProjectInfo, ProjectType

log = get_logger(__name__)

DEFAULT_SIZE_CAP = 50 * 1024 * 1024
DEFAULT_MAX_DEPTH = 3

_PROCESSABLE_EXTENSIONS = {"rs", "py", "toml", "json", "yaml", "yml", "md"}
_PROCESSABLE_NAMES = {".env"}


class ProjectClassifier:
    def __init__(
        self,
        markers: ProjectMarkers | None = None,
        size_cap: int = DEFAULT_SIZE_CAP,
        max_depth: int = DEFAULT_MAX_DEPTH,
        skip_dirs: Iterable[str] | None = None,
    ) -> None:
        self.markers = markers or ProjectMarkers()
        self.size_cap = size_cap
        self.max_depth = max_depth
        self.skip_dirs = frozenset(self.markers.skip_dirs if skip_dirs is None else skip_dirs)

    @classmethod
    def from_config(
        cls, config: DetectionConfig, markers: ProjectMarkers | None = None
    ) -> ProjectClassifier:
        return cls(
            markers=markers,
            size_cap=config.max_file_size,
            max_depth=config.max_depth,
            skip_dirs=() if config.include_build_artifacts else None,
        )

    # --- Classification -------------------------------------------------------

    def detect(self, root: Path | str) -> ProjectInfo:
        """Classify *root*; raises ProjectScanError if it cannot be listed."""
        root = Path(root)
        if not os.path.isdir(root):
            raise ProjectScanError(f"Not a directory: {root}")

        has_build = os.path.isfile(root / BUILD_DESCRIPTOR)
        has_requirements = os.path.isfile(root / REQUIREMENTS_MANIFEST)
        has_script = os.path.isfile(root / BUILD_SCRIPT)

        has_deps = False
        version: str | None = None
        build_text: str | None = None

        if has_build:
            build_text = read_text(root / BUILD_DESCRIPTOR)
            if build_text is not None:
                has_deps = contains_any(build_text, self.markers.rust_dependencies)
                version = extract_version(build_text, self.markers.core_dependencies)

        if has_requirements:
            req_text = read_text(root / REQUIREMENTS_MANIFEST)
            if req_text is not None:
                if contains_any(req_text, self.markers.python_dependencies):
                    has_deps = True
                if version is None:
                    version = extract_pinned_requirement(req_text, self.markers.core_dependencies)

        has_config = self._has_sdk_config(root)
        size = self._estimate_size(root)

        project_type = self._classify(
            has_build=has_build,
            has_requirements=has_requirements,
            has_deps=has_deps,
            has_config=has_config,
            build_text=build_text,
        )
        log.debug("classified %s as %s", root, project_type)
        return ProjectInfo(
            project_type=project_type,
            root_path=root,
            has_build_descriptor=has_build,
            has_requirements_manifest=has_requirements,
            has_build_script=has_script,
            has_sdk_dependencies=has_deps,
            has_sdk_config=has_config,
            estimated_size=size,
            sdk_version=version,
        )

    def _has_sdk_config(self, root: Path) -> bool:
        for name in self.markers.config_files:
            path = root / name
            if not os.path.isfile(path):
                continue
            content = read_text(path)
            if content is not None and contains_any(content, self.markers.config_content):
                return True
        return any(os.path.isdir(root / d) for d in self.markers.sdk_directories)

    def _classify(
        self,
        *,
        has_build: bool,
        has_requirements: bool,
        has_deps: bool,
        has_config: bool,
        build_text: str | None,
    ) -> ProjectType:
        if not (has_deps or has_config):
            return "none"
        if has_build and has_requirements:
            return "mixed"
        if has_build:
            if build_text is not None and self.markers.mcp_dependency in build_text:
                return "mcp_server"
            return "rust_sdk"
        if has_requirements:
            return "python_sdk"
        # Config-only signal defaults to the Python family
        return "python_sdk" if has_config else "none"

    def _estimate_size(self, root: Path) -> int:
        total = 0
        pending = [root]
        while pending:
            current = pending.pop()
            try:
                with os.scandir(current) as it:
                    entries = list(it)
            except OSError as exc:
                if current == root:
                    raise ProjectScanError(f"Cannot list {root}: {exc}") from exc
                log.debug("skipping unreadable directory %s: %s", current, exc)
                continue
            for entry in entries:
                if entry.name in self.skip_dirs:
                    continue
                try:
                    if entry.is_dir(follow_symlinks=False):
                        pending.append(Path(entry.path))
                    elif entry.is_file(follow_symlinks=False):
                        total += entry.stat(follow_symlinks=False).st_size
                except OSError as exc:
                    log.debug("cannot stat %s: %s", entry.path, exc)
                    continue
                if total > self.size_cap:
                    return total
        return total

    # --- Helpers ----------------------------------------------------------------

    def should_process_file(self, path: Path | str) -> bool:
        """Quick admission check: small enough and of a relevant kind."""
        path = Path(path)
        if not os.path.exists(path):
            return False
        try:
            size = os.stat(path).st_size
        except OSError as exc:
            raise ProjectScanError(f"Failed to get metadata for {path}: {exc}") from exc
        if size > self.size_cap:
            return False
        extension = path.suffix[1:]
        if extension:
            return extension in _PROCESSABLE_EXTENSIONS
        return path.name in _PROCESSABLE_NAMES

    # --- Finder -------------------------------------------------------------------

    def find_projects(self, root: Path | str) -> list[ProjectInfo]:
        """Return every detected project under *root*, depth-first.

        A detected project is a leaf: nested projects inside it are not
        reported. Directories deeper than ``max_depth`` (root is depth 0) are
        not visited, and unreadable ones are skipped.
        """
        projects: list[ProjectInfo] = []
        pending: list[tuple[Path, int]] = [(Path(root), 0)]
        while pending:
            directory, depth = pending.pop()
            if depth >= self.max_depth:
                continue
            try:
                info = self.detect(directory)
            except ProjectScanError as exc:
                log.debug("skipping %s: %s", directory, exc)
                continue
            if info.project_type != "none":
                projects.append(info)
                continue
            try:
                children = self._child_dirs(directory)
            except OSError as exc:
                log.debug("skipping children of %s: %s", directory, exc)
                continue
            pending.extend((child, depth + 1) for child in reversed(children))
        return projects

    def _child_dirs(self, directory: Path) -> list[Path]:
        with os.scandir(directory) as it:
            names = sorted(
                e.name for e in it if e.name not in self.skip_dirs and _is_real_dir(e)
            )
        return [directory / n for n in names]


def _is_real_dir(entry: os.DirEntry) -> bool:
    try:
        return entry.is_dir(follow_symlinks=False)
    except OSError:
        return False
