from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

DEFAULT_PIPELINE_PATH = Path(__file__).resolve().parent / "pipeline.yaml"


@dataclass(frozen=True)
class PipelineSettings:
    """Policy knobs for planning, enrichment and pattern comparison."""

    enrich_limit: int = 10
    compare_limit: int = 5
    max_concurrency: int = 5
    task_timeout_s: float = 30.0
    preview_lines: int = 10
    fetch_repository_metadata: bool = True

    planning_timeout_s: float = 30.0
    planning_temperature: float = 0.2
    planning_max_output_tokens: int = 1024

    analysis_temperature: float = 0.3
    analysis_max_output_tokens: int = 2048
    analysis_max_target_chars: int = 20000

    http_timeout_s: float = 15.0
    search_per_page: int = 30
    pattern_query_chars: int = 200

    languages: dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        for name in ("enrich_limit", "compare_limit", "preview_lines", "analysis_max_target_chars"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0")
        for name in ("max_concurrency", "search_per_page", "pattern_query_chars"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be >= 1")
        for name in ("task_timeout_s", "planning_timeout_s", "http_timeout_s"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be > 0")
        if self.search_per_page > 100:
            raise ValueError("search_per_page must be <= 100")

    @classmethod
    def from_yaml(cls, path: str | None = None) -> "PipelineSettings":
        settings_path = Path(path) if path else DEFAULT_PIPELINE_PATH
        if not settings_path.exists():
            raise ValueError(f"Pipeline settings not found at {settings_path}")

        data = yaml.safe_load(settings_path.read_text(encoding="utf-8")) or {}
        if not isinstance(data, dict):
            raise ValueError("Invalid pipeline settings: expected a mapping")

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PipelineSettings":
        enrichment = _section(data, "enrichment")
        planning = _section(data, "planning")
        analysis = _section(data, "analysis")
        github = _section(data, "github")
        languages = _section(data, "languages")

        kwargs: dict[str, Any] = {}
        _copy(kwargs, enrichment, "enrich_limit", int)
        _copy(kwargs, enrichment, "compare_limit", int)
        _copy(kwargs, enrichment, "max_concurrency", int)
        _copy(kwargs, enrichment, "task_timeout_s", float)
        _copy(kwargs, enrichment, "preview_lines", int)
        _copy(kwargs, enrichment, "fetch_repository_metadata", bool)
        _copy(kwargs, planning, "timeout_s", float, target="planning_timeout_s")
        _copy(kwargs, planning, "temperature", float, target="planning_temperature")
        _copy(kwargs, planning, "max_output_tokens", int, target="planning_max_output_tokens")
        _copy(kwargs, analysis, "temperature", float, target="analysis_temperature")
        _copy(kwargs, analysis, "max_output_tokens", int, target="analysis_max_output_tokens")
        _copy(kwargs, analysis, "max_target_chars", int, target="analysis_max_target_chars")
        _copy(kwargs, github, "http_timeout_s", float)
        _copy(kwargs, github, "search_per_page", int)
        _copy(kwargs, github, "pattern_query_chars", int)

        kwargs["languages"] = {
            str(ext).lower().lstrip("."): str(lang) for ext, lang in languages.items()
        }
        return cls(**kwargs)


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ValueError(f"Invalid pipeline settings: '{name}' must be a mapping")
    return section


def _copy(kwargs: dict[str, Any], section: dict[str, Any], key: str, cast, target: str | None = None):
    if key not in section:
        return
    value = section[key]
    if cast is bool:
        if not isinstance(value, bool):
            raise ValueError(f"Invalid pipeline setting '{key}': expected true/false")
        kwargs[target or key] = value
        return
    try:
        kwargs[target or key] = cast(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid pipeline setting '{key}': {value!r}") from e
