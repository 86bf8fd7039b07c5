"""ADK configuration analyzer.

Discovery:
- a fixed list of well-known config filenames directly under the root;
- a shallow (non-recursive) scan of ``src/``, ``config/`` and
  ``.kiro/settings/`` for config-looking files.

Each discovered file is scanned for four marker categories (``env``, ``key``,
``google``, ``vertex``). Files carrying any marker feed the aggregate flags,
the version and, for ``.env`` files, the allow-listed environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path

from adk_inspector.detect.base import contains_any, extract_version, matching_markers, read_text
from adk_inspector.detect.markers import (
    BUILD_DESCRIPTOR,
    BUILD_SCRIPT,
    REQUIREMENTS_MANIFEST,
    ConfigMarkers,
)
from adk_inspector.errors import ConfigScanError
from adk_inspector.logging import get_logger
from adk_inspector.types import ConfigFileInfo, ConfigInfo, ConfigType

log = get_logger(__name__)

_SPECIAL_NAMES: dict[str, ConfigType] = {
    BUILD_DESCRIPTOR: "build_descriptor",
    REQUIREMENTS_MANIFEST: "requirements",
    BUILD_SCRIPT: "language_build",
    "pyproject.toml": "language_build",
    "mcp.json": "mcp_config",
}
_EXTENSION_TYPES: dict[str, ConfigType] = {
    "json": "json",
    "yaml": "yaml",
    "yml": "yaml",
    "toml": "toml",
}


def config_type_for(path: Path) -> ConfigType:
    name = path.name
    if name in _SPECIAL_NAMES:
        return _SPECIAL_NAMES[name]
    if name.startswith(".env"):
        return "environment"
    return _EXTENSION_TYPES.get(path.suffix[1:].lower(), "unknown")


def is_compatible_sdk_version(version: str) -> bool:
    # Every non-empty ADK version is accepted for now
    return bool(version)


class ConfigAnalyzer:
    def __init__(self, markers: ConfigMarkers | None = None) -> None:
        self.markers = markers or ConfigMarkers()

    def detect(self, root: Path | str) -> ConfigInfo:
        """Scan *root* for ADK configuration.

        Raises ConfigScanError when *root* is not a directory that can be listed.
        """
        root = Path(root)
        if not os.path.isdir(root):
            raise ConfigScanError(f"Not a directory: {root}")
        try:
            with os.scandir(root):
                pass
        except OSError as exc:
            raise ConfigScanError(f"Cannot list {root}: {exc}") from exc

        files: list[ConfigFileInfo] = []
        has_sdk_config = False
        version: str | None = None
        primary = secondary = mcp = False
        env: dict[str, str] = {}

        for path in self.find_config_files(root):
            info, content = self._analyze(path)
            files.append(info)
            if not info.contains_sdk_settings or content is None:
                continue

            has_sdk_config = True
            if version is None:
                version = extract_version(content, self.markers.version_markers)
            primary = primary or contains_any(content, self.markers.google_api)
            secondary = secondary or contains_any(content, self.markers.vertex_ai)
            mcp = mcp or contains_any(content, self.markers.mcp_server)
            if info.config_type == "environment":
                env.update(self._environment_variables(content))

        return ConfigInfo(
            config_files=files,
            has_sdk_config=has_sdk_config,
            sdk_version=version,
            primary_api_configured=primary,
            secondary_api_configured=secondary,
            mcp_server_configured=mcp,
            environment_variables=env,
        )

    # --- Discovery --------------------------------------------------------------

    def find_config_files(self, root: Path) -> list[Path]:
        found: list[Path] = []
        seen: set[Path] = set()

        def add(path: Path) -> None:
            key = path.resolve()
            if key not in seen:
                seen.add(key)
                found.append(path)

        for name in self.markers.config_files:
            path = root / name
            if os.path.isfile(path):
                add(path)

        for sub in self.markers.scan_subdirs:
            subdir = root / sub
            if not os.path.isdir(subdir):
                continue
            try:
                with os.scandir(subdir) as it:
                    entries = sorted(it, key=lambda e: e.name)
            except OSError as exc:
                log.debug("skipping unreadable directory %s: %s", subdir, exc)
                continue
            for entry in entries:
                if entry.is_file(follow_symlinks=False) and self.is_config_file(entry.name):
                    add(Path(entry.path))
        return found

    def is_config_file(self, filename: str) -> bool:
        if filename.rsplit(".", 1)[-1] in self.markers.config_extensions:
            return True
        lowered = filename.lower()
        return any(k in lowered for k in self.markers.config_name_keywords)

    # --- Per-file analysis --------------------------------------------------------

    def _analyze(self, path: Path) -> tuple[ConfigFileInfo, str | None]:
        config_type = config_type_for(path)
        content = read_text(path)
        if content is None:
            log.warning("cannot read config file %s", path)
            return ConfigFileInfo(path=path, config_type=config_type), None

        settings: list[str] = []
        for category, markers in (
            ("env", self.markers.env_vars),
            ("key", self.markers.config_keys),
            ("google", self.markers.google_api),
            ("vertex", self.markers.vertex_ai),
        ):
            settings.extend(f"{category}:{m}" for m in matching_markers(content, markers))

        info = ConfigFileInfo(
            path=path,
            config_type=config_type,
            contains_sdk_settings=bool(settings),
            detected_settings=settings,
        )
        return info, content

    def _environment_variables(self, content: str) -> dict[str, str]:
        # Unknown keys are dropped so unrelated secrets never reach the result
        env: dict[str, str] = {}
        for raw in content.splitlines():
            line = raw.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, value = line.split("=", 1)
            key = key.strip()
            if key in self.markers.env_vars:
                env[key] = value.strip()
        return env

    # --- Reporting ----------------------------------------------------------------

    def validate(self, info: ConfigInfo) -> list[str]:
        """Return configuration problems, most fundamental first."""
        if not info.has_sdk_config:
            return ["No ADK configuration detected"]

        issues: list[str] = []
        if not info.primary_api_configured and not info.secondary_api_configured:
            issues.append("Neither Google API nor Vertex AI is configured")
        if not any(f.config_type == "environment" for f in info.config_files):
            issues.append("No .env file found for environment configuration")
        key = self.markers.api_key_var
        if info.primary_api_configured and key not in info.environment_variables:
            issues.append(f"{key} not found in environment variables")
        return issues

    def recommendations(self, info: ConfigInfo) -> list[str]:
        if not info.has_sdk_config:
            return [
                "Add ADK dependencies to your project configuration",
                "Create a .env file for API key configuration",
            ]

        recs: list[str] = []
        if not info.mcp_server_configured:
            recs.append(
                "Consider setting up arkaft-mcp-google-adk MCP server for enhanced ADK support"
            )
        if info.primary_api_configured and not info.secondary_api_configured:
            recs.append("Consider using Vertex AI for production deployments")
        if info.sdk_version is None:
            recs.append("Pin ADK dependency versions for reproducible builds")
        return recs
