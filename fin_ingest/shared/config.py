"""Configuration loading utilities for the statement ingestion suite."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping, MutableMapping

import yaml

from . import paths
from .exceptions import ConfigurationError

OUTPUT_FORMATS = ("csv", "json")


@dataclass(frozen=True, slots=True)
class PdfSettings:
    """Layout reconstruction tuning for text-layer PDFs."""

    y_tolerance: float
    gap_threshold: float
    diagnostic_lines: int


@dataclass(frozen=True, slots=True)
class SegmentationSettings:
    """Window sizes used by the PDF transaction segmenter."""

    type_window: int
    amount_window: int
    description_lines: int
    generic_lookahead: int


@dataclass(frozen=True, slots=True)
class ExtractionSettings:
    """Composite extraction configuration handed to the pipeline."""

    pdf: PdfSettings
    segmentation: SegmentationSettings


@dataclass(frozen=True, slots=True)
class OutputSettings:
    """CLI output configuration."""

    format: str
    directory: Path


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Top-level application configuration."""

    source_path: Path
    extraction: ExtractionSettings
    output: OutputSettings

    def with_output_format(self, output_format: str) -> AppConfig:
        """Return a copy with a different output format."""
        if output_format not in OUTPUT_FORMATS:
            raise ConfigurationError(
                f"Unknown output format '{output_format}'. Expected one of: {', '.join(OUTPUT_FORMATS)}"
            )
        return replace(self, output=replace(self.output, format=output_format))


def _default_config() -> dict[str, Any]:
    return {
        "extraction": {
            "pdf": {
                "y_tolerance": 3.0,
                "gap_threshold": 1.0,
                "diagnostic_lines": 10,
            },
            "segmentation": {
                "type_window": 5,
                "amount_window": 5,
                "description_lines": 3,
                "generic_lookahead": 2,
            },
        },
        "output": {
            "format": "csv",
            "directory": paths.DEFAULT_OUTPUT_DIR,
        },
    }


ENV_OVERRIDE_SPEC: dict[str, tuple[str, type]] = {
    "extraction.pdf.y_tolerance": ("FININGEST_PDF_Y_TOLERANCE", float),
    "extraction.pdf.gap_threshold": ("FININGEST_PDF_GAP_THRESHOLD", float),
    "extraction.pdf.diagnostic_lines": ("FININGEST_PDF_DIAGNOSTIC_LINES", int),
    "extraction.segmentation.type_window": ("FININGEST_SEGMENT_TYPE_WINDOW", int),
    "extraction.segmentation.amount_window": ("FININGEST_SEGMENT_AMOUNT_WINDOW", int),
    "extraction.segmentation.description_lines": ("FININGEST_SEGMENT_DESCRIPTION_LINES", int),
    "extraction.segmentation.generic_lookahead": ("FININGEST_SEGMENT_GENERIC_LOOKAHEAD", int),
    "output.format": ("FININGEST_OUTPUT_FORMAT", str),
    "output.directory": ("FININGEST_OUTPUT_DIR", str),
}


def default_extraction_settings() -> ExtractionSettings:
    """Return extraction settings built purely from defaults (no file or env access)."""
    return _build_extraction(_default_config()["extraction"])


def load_config(
    config_path: str | Path | None = None,
    env: Mapping[str, str] | None = None,
) -> AppConfig:
    """Load configuration from defaults, YAML file, and env overrides."""
    env = dict(os.environ if env is None else env)
    resolved_config_path = _resolve_config_path(config_path, env)
    file_data = _load_yaml(resolved_config_path)
    merged: dict[str, Any] = _deep_merge(_default_config(), file_data)
    merged = _apply_env_overrides(merged, env)
    return _build_config(merged, resolved_config_path)


def _resolve_config_path(config_path: str | Path | None, env: Mapping[str, str]) -> Path:
    if config_path:
        return paths.resolve_path(config_path)
    return paths.default_config_path(env=env)


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as handle:
        try:
            data = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Config file at {path} is not valid YAML: {exc}") from exc
        if not isinstance(data, MutableMapping):
            raise ConfigurationError(f"Config file at {path} must define a mapping root object.")
        return dict(data)


def _deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], Mapping) and isinstance(value, Mapping):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _apply_env_overrides(config: dict[str, Any], env: Mapping[str, str]) -> dict[str, Any]:
    config_copy = _deep_merge(config, {})
    for dotted_key, (env_key, expected_type) in ENV_OVERRIDE_SPEC.items():
        if env_key not in env:
            continue
        raw_value = env[env_key]
        try:
            value = _coerce_env_value(raw_value, expected_type)
        except ValueError as exc:
            raise ConfigurationError(
                f"Environment override {env_key} has invalid value '{raw_value}': {exc}"
            ) from exc
        _assign_nested(config_copy, dotted_key.split("."), value)
    return config_copy


def _coerce_env_value(raw: str, expected_type: type) -> Any:
    cleaned = raw.strip()
    if expected_type is int:
        return int(cleaned)
    if expected_type is float:
        return float(cleaned)
    return cleaned


def _assign_nested(target: MutableMapping[str, Any], keys: list[str], value: Any) -> None:
    current = target
    for key in keys[:-1]:
        if key not in current or not isinstance(current[key], MutableMapping):
            current[key] = {}
        else:
            current[key] = dict(current[key])
        current = current[key]  # type: ignore[assignment]
    current[keys[-1]] = value


def _build_extraction(data: Mapping[str, Any]) -> ExtractionSettings:
    pdf_cfg = data["pdf"]
    seg_cfg = data["segmentation"]
    pdf = PdfSettings(
        y_tolerance=float(pdf_cfg["y_tolerance"]),
        gap_threshold=float(pdf_cfg["gap_threshold"]),
        diagnostic_lines=int(pdf_cfg["diagnostic_lines"]),
    )
    segmentation = SegmentationSettings(
        type_window=int(seg_cfg["type_window"]),
        amount_window=int(seg_cfg["amount_window"]),
        description_lines=int(seg_cfg["description_lines"]),
        generic_lookahead=int(seg_cfg["generic_lookahead"]),
    )
    if pdf.y_tolerance < 0 or pdf.gap_threshold < 0:
        raise ValueError("pdf tolerances must be non-negative")
    if min(
        segmentation.type_window,
        segmentation.amount_window,
        segmentation.description_lines,
        segmentation.generic_lookahead,
    ) < 0:
        raise ValueError("segmentation windows must be non-negative")
    return ExtractionSettings(pdf=pdf, segmentation=segmentation)


def _build_config(data: Mapping[str, Any], source_path: Path) -> AppConfig:
    try:
        extraction = _build_extraction(data["extraction"])
        output_format = str(data["output"]["format"]).lower()
        if output_format not in OUTPUT_FORMATS:
            raise ValueError(f"output.format must be one of {', '.join(OUTPUT_FORMATS)}")
        output = OutputSettings(
            format=output_format,
            directory=paths.resolve_path(str(data["output"]["directory"])),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid configuration structure: {exc}") from exc

    return AppConfig(source_path=source_path, extraction=extraction, output=output)
