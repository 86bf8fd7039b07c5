"""Fixed marker tables used by the detectors.

The tables are frozen dataclasses so each detector holds an immutable copy that
tests can swap out with ``dataclasses.replace``.
"""

from __future__ import annotations

from dataclasses import dataclass

BUILD_DESCRIPTOR = "Cargo.toml"
REQUIREMENTS_MANIFEST = "requirements.txt"
BUILD_SCRIPT = "setup.py"

SKIP_DIRS = frozenset({"target", "node_modules", ".git", "__pycache__", ".venv"})


@dataclass(frozen=True)
class ProjectMarkers:
    rust_dependencies: tuple[str, ...] = (
        "google-adk",
        "google-cloud-adk",
        "adk-core",
        "adk-runtime",
        "google-genai",
        "vertexai",
        "rmcp",
    )
    python_dependencies: tuple[str, ...] = (
        "google-adk",
        "google-cloud-adk",
        "google-genai",
        "vertexai",
        "google-cloud-aiplatform",
        "adk-agents",
    )
    # Names whose lines are searched for a version literal
    core_dependencies: tuple[str, ...] = ("google-adk", "adk-core")
    # Matches rmcp as well as *-mcp-* crates
    mcp_dependency: str = "mcp"
    config_files: tuple[str, ...] = (
        ".env",
        ".env.template",
        "adk.toml",
        "adk-config.json",
        "vertex-config.json",
        "google-cloud-config.json",
    )
    config_content: tuple[str, ...] = ("GOOGLE_API_KEY", "VERTEXAI", "ADK", "google-genai")
    sdk_directories: tuple[str, ...] = ("multi_tool_agent", "adk_agents", "src/expert", "src/review")
    skip_dirs: frozenset[str] = SKIP_DIRS


@dataclass(frozen=True)
class ConfigMarkers:
    env_vars: tuple[str, ...] = (
        "GOOGLE_API_KEY",
        "GOOGLE_APPLICATION_CREDENTIALS",
        "GOOGLE_GENAI_USE_VERTEXAI",
        "VERTEXAI_PROJECT",
        "VERTEXAI_LOCATION",
        "ADK_VERSION",
        "ADK_DOCS_VERSION",
        "RUST_LOG",
    )
    config_keys: tuple[str, ...] = (
        "google-adk",
        "google-genai",
        "vertexai",
        "adk-core",
        "adk-runtime",
        "rmcp",
        "arkaft-mcp-google-adk",
    )
    google_api: tuple[str, ...] = (
        "GOOGLE_API_KEY",
        "google_api_key",
        "googleApiKey",
        "GOOGLE_APPLICATION_CREDENTIALS",
        "google-cloud",
    )
    vertex_ai: tuple[str, ...] = (
        "VERTEXAI",
        "vertex_ai",
        "vertexAi",
        "GOOGLE_GENAI_USE_VERTEXAI",
        "vertex-ai",
    )
    mcp_server: tuple[str, ...] = ("rmcp", "arkaft-mcp-google-adk", "mcpServers")
    version_markers: tuple[str, ...] = ("google-adk",)
    api_key_var: str = "GOOGLE_API_KEY"
    config_files: tuple[str, ...] = (
        ".env",
        ".env.template",
        ".env.local",
        ".env.production",
        ".env.development",
        BUILD_DESCRIPTOR,
        REQUIREMENTS_MANIFEST,
        BUILD_SCRIPT,
        "pyproject.toml",
        "config.json",
        "config.yaml",
        "config.yml",
        "config.toml",
        "adk.toml",
        "adk-config.json",
        "vertex-config.json",
        "google-cloud-config.json",
        "mcp.json",
        ".kiro/settings/mcp.json",
    )
    scan_subdirs: tuple[str, ...] = ("src", "config", ".kiro/settings")
    config_extensions: tuple[str, ...] = ("json", "yaml", "yml", "toml", "env")
    config_name_keywords: tuple[str, ...] = ("config", "settings", "adk", "vertex", "google")
