"""Detection presets shared by the classifier and the file validator."""

from __future__ import annotations

from pydantic import BaseModel, Field

MIB = 1024 * 1024


class DetectionConfig(BaseModel):
    max_file_size: int = Field(default=50 * MIB, ge=0)
    min_file_size: int = Field(default=1, ge=0)
    # Keep target/, node_modules/, .venv/ ... in the size estimate and the finder walk
    include_build_artifacts: bool = False
    max_depth: int = Field(default=3, ge=0)

    @classmethod
    def default(cls) -> DetectionConfig:
        return cls()

    @classmethod
    def for_code_review(cls) -> DetectionConfig:
        return cls(max_file_size=1 * MIB, min_file_size=10, max_depth=5)

    @classmethod
    def for_project_analysis(cls) -> DetectionConfig:
        return cls(max_file_size=10 * MIB, include_build_artifacts=True, max_depth=10)


PRESETS = {
    "default": DetectionConfig.default,
    "code-review": DetectionConfig.for_code_review,
    "project-analysis": DetectionConfig.for_project_analysis,
}


def load_preset(name: str) -> DetectionConfig:
    try:
        factory = PRESETS[name]
    except KeyError:
        raise ValueError(f"Unknown preset {name!r} (choose from {', '.join(PRESETS)})") from None
    return factory()
