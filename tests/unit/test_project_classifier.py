from __future__ import annotations

import os
from dataclasses import replace
from pathlib import Path

import pytest

from adk_inspector.detect.markers import ProjectMarkers
from adk_inspector.detect.project import ProjectClassifier
from adk_inspector.errors import ProjectScanError
from adk_inspector.settings import DetectionConfig


def _write_cargo(root: Path, deps: list[tuple[str, str]], name: str = "test-project") -> None:
    lines = [
        "[package]",
        f'name = "{name}"',
        'version = "0.1.0"',
        'edition = "2021"',
        "",
        "[dependencies]",
    ]
    lines += [f'{dep} = "{ver}"' for dep, ver in deps]
    (root / "Cargo.toml").write_text("\n".join(lines) + "\n", encoding="utf-8")


def _write_requirements(root: Path, deps: list[str]) -> None:
    (root / "requirements.txt").write_text("\n".join(deps), encoding="utf-8")


def test_rust_adk_project(tmp_path: Path) -> None:
    _write_cargo(tmp_path, [("google-adk", "1.0"), ("tokio", "1.0")])

    info = ProjectClassifier().detect(tmp_path)

    assert info.project_type == "rust_sdk"
    assert info.root_path == tmp_path
    assert info.has_build_descriptor
    assert not info.has_requirements_manifest
    assert info.has_sdk_dependencies
    assert info.sdk_version == "1.0"


def test_python_adk_project(tmp_path: Path) -> None:
    _write_requirements(tmp_path, ["google-adk==1.0.0", "requests==2.28.0"])

    info = ProjectClassifier().detect(tmp_path)

    assert info.project_type == "python_sdk"
    assert info.has_requirements_manifest
    assert not info.has_build_descriptor
    assert info.has_sdk_dependencies
    assert info.sdk_version == "1.0.0"


def test_mcp_marker_decides_between_mcp_server_and_rust(tmp_path: Path) -> None:
    mcp_root = tmp_path / "with_mcp"
    plain_root = tmp_path / "without_mcp"
    mcp_root.mkdir()
    plain_root.mkdir()
    _write_cargo(mcp_root, [("rmcp", "0.6.3"), ("google-adk", "1.0")], name="adk-helper")
    _write_cargo(plain_root, [("google-adk", "1.0")], name="adk-helper")

    classifier = ProjectClassifier()

    assert classifier.detect(mcp_root).project_type == "mcp_server"
    assert classifier.detect(plain_root).project_type == "rust_sdk"


def test_both_manifests_yield_mixed(tmp_path: Path) -> None:
    _write_cargo(tmp_path, [("google-adk", "0.1.0"), ("rmcp", "0.6")])
    _write_requirements(tmp_path, ["google-adk-agents==0.1.0"])

    info = ProjectClassifier().detect(tmp_path)

    # Both manifests win over the MCP marker
    assert info.project_type == "mixed"
    assert info.has_build_descriptor and info.has_requirements_manifest


def test_non_adk_rust_project(tmp_path: Path) -> None:
    _write_cargo(tmp_path, [("serde", "1.0"), ("tokio", "1.0"), ("clap", "4.0")])

    info = ProjectClassifier().detect(tmp_path)

    assert info.project_type == "none"
    assert info.has_build_descriptor
    assert not info.has_sdk_dependencies
    assert not info.has_sdk_config
    assert info.sdk_version is None


def test_empty_directory_is_not_a_project(tmp_path: Path) -> None:
    info = ProjectClassifier().detect(tmp_path)

    assert info.project_type == "none"
    assert not info.has_sdk_dependencies
    assert not info.has_sdk_config
    assert info.estimated_size == 0


def test_config_only_defaults_to_python(tmp_path: Path) -> None:
    (tmp_path / ".env").write_text("GOOGLE_API_KEY=abc\n", encoding="utf-8")

    info = ProjectClassifier().detect(tmp_path)

    assert info.project_type == "python_sdk"
    assert info.has_sdk_config
    assert not info.has_sdk_dependencies


def test_config_file_without_marker_is_ignored(tmp_path: Path) -> None:
    (tmp_path / ".env").write_text("DATABASE_URL=postgres://x\n", encoding="utf-8")

    assert ProjectClassifier().detect(tmp_path).project_type == "none"


def test_sdk_directory_counts_as_config(tmp_path: Path) -> None:
    (tmp_path / "multi_tool_agent").mkdir()

    info = ProjectClassifier().detect(tmp_path)

    assert info.has_sdk_config
    assert info.project_type == "python_sdk"


def test_nested_sdk_directory(tmp_path: Path) -> None:
    (tmp_path / "src" / "expert").mkdir(parents=True)
    _write_cargo(tmp_path, [("serde", "1.0")])

    info = ProjectClassifier().detect(tmp_path)

    assert info.has_sdk_config
    assert info.project_type == "rust_sdk"


@pytest.mark.parametrize(
    "dependency, expected",
    [
        ("google-adk", True),
        ("google-cloud-adk", True),
        ("adk-core", True),
        ("vertexai", True),
        ("serde", False),
    ],
)
def test_rust_dependency_markers(tmp_path: Path, dependency: str, expected: bool) -> None:
    _write_cargo(tmp_path, [(dependency, "0.5.0")])

    assert ProjectClassifier().detect(tmp_path).has_sdk_dependencies is expected


def test_version_from_inline_table(tmp_path: Path) -> None:
    (tmp_path / "Cargo.toml").write_text(
        '[package]\nname = "x"\nversion = "0.1.0"\n\n'
        '[dependencies]\ngoogle-adk = { version = "1.2.3", features = ["full"] }\n',
        encoding="utf-8",
    )

    info = ProjectClassifier().detect(tmp_path)

    assert info.sdk_version == "1.2.3"


def test_cargo_version_wins_over_requirements_pin(tmp_path: Path) -> None:
    (tmp_path / "Cargo.toml").write_text(
        '[dependencies]\nadk-core = { version = "0.9.1" }\n', encoding="utf-8"
    )
    _write_requirements(tmp_path, ["google-adk==1.0.0"])

    assert ProjectClassifier().detect(tmp_path).sdk_version == "0.9.1"


def test_detection_is_repeatable(tmp_path: Path) -> None:
    _write_cargo(tmp_path, [("google-adk", "1.4.0")])
    classifier = ProjectClassifier()

    first = classifier.detect(tmp_path)
    second = classifier.detect(tmp_path)

    assert first == second
    assert first is not second


def test_malformed_manifest_contributes_nothing(tmp_path: Path) -> None:
    (tmp_path / "Cargo.toml").write_text("invalid toml content [[[", encoding="utf-8")

    info = ProjectClassifier().detect(tmp_path)

    assert info.project_type == "none"
    assert info.has_build_descriptor


def test_undecodable_manifest_keeps_defaults(tmp_path: Path) -> None:
    (tmp_path / "Cargo.toml").write_bytes(b"\xff\xfe google-adk = \"1.0\"")

    info = ProjectClassifier().detect(tmp_path)

    assert info.has_build_descriptor
    assert not info.has_sdk_dependencies
    assert info.sdk_version is None
    assert info.project_type == "none"


def test_setup_py_is_probed_but_not_a_requirements_manifest(tmp_path: Path) -> None:
    (tmp_path / "setup.py").write_text("from setuptools import setup\nsetup()\n", encoding="utf-8")

    info = ProjectClassifier().detect(tmp_path)

    assert info.has_build_script
    assert not info.has_requirements_manifest
    assert info.project_type == "none"


def test_missing_root_raises(tmp_path: Path) -> None:
    with pytest.raises(ProjectScanError):
        ProjectClassifier().detect(tmp_path / "missing")


def test_file_root_raises(tmp_path: Path) -> None:
    f = tmp_path / "file.txt"
    f.write_text("x", encoding="utf-8")

    with pytest.raises(ProjectScanError):
        ProjectClassifier().detect(f)


def test_custom_markers(tmp_path: Path) -> None:
    _write_cargo(tmp_path, [("my-agent-kit", "2.0")])
    markers = replace(ProjectMarkers(), rust_dependencies=("my-agent-kit",))

    assert ProjectClassifier(markers=markers).detect(tmp_path).project_type == "rust_sdk"
    assert ProjectClassifier().detect(tmp_path).project_type == "none"


# --- Size estimation -----------------------------------------------------------


def test_size_estimate_counts_files(tmp_path: Path) -> None:
    _write_cargo(tmp_path, [("google-adk", "0.1.0")])
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "main.rs").write_text("fn main() {}", encoding="utf-8")
    (tmp_path / "large_file.txt").write_text("x" * 10_000, encoding="utf-8")

    info = ProjectClassifier().detect(tmp_path)

    assert info.estimated_size >= 10_000 + len("fn main() {}")


def test_size_estimate_skips_build_directories(tmp_path: Path) -> None:
    (tmp_path / "lib.rs").write_text("x" * 100, encoding="utf-8")
    for skipped in ("target", "node_modules", ".git", "__pycache__", ".venv"):
        (tmp_path / skipped).mkdir()
        (tmp_path / skipped / "blob").write_bytes(b"y" * 5_000)

    assert ProjectClassifier().detect(tmp_path).estimated_size == 100


def test_size_estimate_stops_past_the_cap(tmp_path: Path) -> None:
    for i in range(5):
        (tmp_path / f"chunk_{i}.bin").write_bytes(b"z" * 80)

    info = ProjectClassifier(size_cap=100).detect(tmp_path)

    assert info.estimated_size == 160


def test_from_config_can_include_build_artifacts(tmp_path: Path) -> None:
    (tmp_path / "target").mkdir()
    (tmp_path / "target" / "out.bin").write_bytes(b"a" * 300)

    config = DetectionConfig.for_project_analysis()
    classifier = ProjectClassifier.from_config(config)

    assert classifier.max_depth == 10
    assert classifier.size_cap == config.max_file_size
    assert classifier.detect(tmp_path).estimated_size == 300


# --- should_process_file ---------------------------------------------------------


def test_should_process_file_size_and_kind(tmp_path: Path) -> None:
    small = tmp_path / "small.rs"
    large = tmp_path / "large.rs"
    binary = tmp_path / "tool.exe"
    env = tmp_path / ".env"
    small.write_text("fn main() {}", encoding="utf-8")
    large.write_text("x" * 2048, encoding="utf-8")
    binary.write_bytes(b"\x00" * 10)
    env.write_text("RUST_LOG=info", encoding="utf-8")

    classifier = ProjectClassifier(size_cap=1024)

    assert classifier.should_process_file(small)
    assert not classifier.should_process_file(large)
    assert not classifier.should_process_file(binary)
    assert classifier.should_process_file(env)
    assert not classifier.should_process_file(tmp_path / "missing.rs")


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="needs symlinks")
def test_should_process_file_dangling_symlink(tmp_path: Path) -> None:
    link = tmp_path / "gone.rs"
    os.symlink(tmp_path / "nowhere.rs", link)

    assert not ProjectClassifier().should_process_file(link)


def test_should_process_file_checks_extension_before_name(tmp_path: Path) -> None:
    requirements = tmp_path / "requirements.txt"
    cargo = tmp_path / "Cargo.toml"
    template = tmp_path / ".env.template"
    for path in (requirements, cargo, template):
        path.write_text("google-adk", encoding="utf-8")

    classifier = ProjectClassifier()

    assert not classifier.should_process_file(requirements)
    assert not classifier.should_process_file(template)
    assert classifier.should_process_file(cargo)
