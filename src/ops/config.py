"""
Configuration loading and validation.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional, Tuple

import yaml

DEFAULT_CONFIG_DIR = "config"


class ConfigError(RuntimeError):
    """Raised when configuration files cannot be read or parsed."""


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into base and return base."""
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            _deep_merge(base[k], v)
        else:
            base[k] = v
    return base


def _read_yaml(path: str) -> Dict[str, Any]:
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping at the top level")
    return data


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration with layering:
    - `default.yaml` (checked in)
    - `config.yaml` (local overrides)
    - plus an explicitly provided path (treated as overrides)

    Both layer files are looked up next to config_path, or in `config/` when
    no path is given.

    Raises:
        ConfigError: If a file exists but cannot be parsed.
    """
    config_dir = os.path.dirname(config_path) if config_path else DEFAULT_CONFIG_DIR
    base_path = os.path.join(config_dir, "default.yaml")
    local_overrides_path = os.path.join(config_dir, "config.yaml")

    try:
        merged: Dict[str, Any] = {}
        if os.path.exists(base_path):
            merged = _read_yaml(base_path)

        if os.path.exists(local_overrides_path):
            merged = _deep_merge(merged, _read_yaml(local_overrides_path))

        if (
            config_path
            and os.path.exists(config_path)
            and os.path.abspath(config_path) != os.path.abspath(local_overrides_path)
            and os.path.abspath(config_path) != os.path.abspath(base_path)
        ):
            merged = _deep_merge(merged, _read_yaml(config_path))
    except (OSError, yaml.YAMLError) as e:
        logging.error(f"Failed to load configuration: {e}")
        raise ConfigError(f"Failed to load configuration: {e}") from e

    return merged


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _check_fraction(section: Dict[str, Any], name: str, prefix: str) -> Optional[str]:
    if name in section:
        value = section[name]
        if not _is_number(value) or not (0 <= value <= 1):
            return f"{prefix}.{name} must be between 0 and 1"
    return None


def validate_config(config: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Validate configuration file structure and values.

    Args:
        config: Configuration dictionary

    Returns:
        Tuple of (is_valid, error_message)
    """
    required_sections = ['source', 'detection', 'heatmap', 'region', 'export', 'log_path', 'log_level']
    for section in required_sections:
        if section not in config:
            return False, f"Missing required configuration section: {section}"

    source = config.get('source') or {}
    if 'tolerance' in source:
        if not _is_number(source['tolerance']) or source['tolerance'] <= 0:
            return False, "source.tolerance must be a positive number"

    detection = config.get('detection') or {}
    backend = detection.get('backend', 'yolo')
    if backend != 'yolo':
        return False, "detection.backend must be: yolo"
    yolo_cfg = detection.get('yolo') or {}
    if 'model' in yolo_cfg and (not isinstance(yolo_cfg['model'], str) or not yolo_cfg['model']):
        return False, "detection.yolo.model must be a non-empty string"
    for name in ('conf_threshold', 'iou_threshold'):
        error = _check_fraction(yolo_cfg, name, 'detection.yolo')
        if error:
            return False, error

    heatmap = config.get('heatmap') or {}
    if 'grid_size' in heatmap:
        gs = heatmap['grid_size']
        if not isinstance(gs, int) or isinstance(gs, bool) or gs < 0:
            return False, "heatmap.grid_size must be a non-negative integer"
    if 'sample_interval' in heatmap:
        if not _is_number(heatmap['sample_interval']) or heatmap['sample_interval'] <= 0:
            return False, "heatmap.sample_interval must be a positive number"
    if 'max_samples' in heatmap:
        ms = heatmap['max_samples']
        if not isinstance(ms, int) or isinstance(ms, bool) or ms <= 0:
            return False, "heatmap.max_samples must be a positive integer"

    region = config.get('region') or {}
    for name in ('threshold', 'band_min', 'band_max', 'h_pad', 'v_pad'):
        error = _check_fraction(region, name, 'region')
        if error:
            return False, error
    if region.get('band_min', 0.05) >= region.get('band_max', 0.70):
        return False, "region.band_min must be below region.band_max"

    export = config.get('export') or {}
    for name in ('frame_interval', 'zoom_factor'):
        if name in export and (not _is_number(export[name]) or export[name] <= 0):
            return False, f"export.{name} must be a positive number"
    if 'zoom_factor' in export and export['zoom_factor'] < 1:
        return False, "export.zoom_factor must be at least 1"
    if 'backpressure_delay' in export:
        if not _is_number(export['backpressure_delay']) or export['backpressure_delay'] < 0:
            return False, "export.backpressure_delay must be a non-negative number"
    for name in ('progress_interval', 'queue_size'):
        if name in export:
            value = export[name]
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                return False, f"export.{name} must be a positive integer"
    error = _check_fraction(export, 'smoothing', 'export')
    if error:
        return False, error
    if export.get('mode', 'overlay') not in ('overlay', 'zoom', 'zoom_preview'):
        return False, "export.mode must be one of: overlay, zoom, zoom_preview"

    if config['log_level'] not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
        return False, "log_level must be one of: DEBUG, INFO, WARNING, ERROR, CRITICAL"

    return True, None
