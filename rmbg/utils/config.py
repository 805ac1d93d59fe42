"""
Configuration loader and validator
"""

import math
import os
import logging
from typing import Dict, Any, Iterable, Optional, Tuple

import yaml

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLDS: Tuple[float, float] = (5.0, 50.0)
DEFAULT_SPLIT_THRESHOLD = 8


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration from YAML file

    Args:
        config_path: Path to YAML configuration file, or None for the
            built-in defaults

    Returns:
        Dictionary containing configuration

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML parsing fails
    """
    if config_path is None:
        config: Dict[str, Any] = {}
        _set_defaults(config)
        logger.debug("Using default configuration")
        return config

    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            config = yaml.safe_load(f) or {}

        if not isinstance(config, dict):
            raise ValueError(f"Configuration root must be a mapping: {config_path}")

        _set_defaults(config)

        logger.info(f"Configuration loaded from {config_path}")
        return config

    except yaml.YAMLError as e:
        logger.error(f"Error parsing YAML configuration: {e}")
        raise


def _set_defaults(config: Dict[str, Any]) -> None:
    """Set default values for missing configuration parameters"""

    # Canny defaults
    if not config.get('canny'):
        config['canny'] = {}
    config['canny'].setdefault('low', DEFAULT_THRESHOLDS[0])
    config['canny'].setdefault('high', DEFAULT_THRESHOLDS[1])

    # Batch defaults
    if not config.get('batch'):
        config['batch'] = {}
    batch_defaults = {
        'split_threshold': DEFAULT_SPLIT_THRESHOLD,
        'max_workers': None,
        'shuffle': True,
    }
    for key, value in batch_defaults.items():
        config['batch'].setdefault(key, value)

    # Path defaults
    if not config.get('paths'):
        config['paths'] = {}
    config['paths'].setdefault('out_logs', None)


def update_config(config: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Update configuration with command-line overrides

    Args:
        config: Base configuration dictionary
        overrides: Mapping of dotted keys (``batch.max_workers``) to values;
            ``None`` values are ignored

    Returns:
        Updated configuration dictionary
    """
    for dotted, value in (overrides or {}).items():
        if value is None:
            continue

        keys = dotted.split('.')
        section = config
        for key in keys[:-1]:
            if not isinstance(section.get(key), dict):
                section[key] = {}
            section = section[key]
        section[keys[-1]] = value
        logger.info(f"Override config.{dotted} = {value}")

    return config


def _parse_threshold(raw: Any) -> Optional[float]:
    if isinstance(raw, bool):
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value) or value < 0:
        return None
    return value


def resolve_thresholds(values: Optional[Iterable[Any]],
                       default: Tuple[float, float] = DEFAULT_THRESHOLDS) -> Tuple[float, float]:
    """
    Turn raw threshold values into a (low, high) pair

    Values that are not finite, non-negative numbers are dropped.  With
    fewer than two valid values the default pair is used, otherwise the
    smallest value becomes ``low`` and the largest ``high``.

    Args:
        values: Raw values, e.g. strings from the command line
        default: Pair to fall back to

    Returns:
        Tuple of (low, high)
    """
    parsed = []
    for raw in values or []:
        value = _parse_threshold(raw)
        if value is None:
            logger.warning(f"Ignoring invalid threshold: {raw!r}")
            continue
        parsed.append(value)

    if len(parsed) < 2:
        if parsed:
            logger.info(f"Need two thresholds, got {len(parsed)}; using defaults {default}")
        low, high = default
        return min(low, high), max(low, high)

    return min(parsed), max(parsed)


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 1


def validate_configuration(cfg: Dict[str, Any]) -> bool:
    """
    Validate configuration parameters

    Args:
        cfg: Configuration dictionary

    Returns:
        True if valid, False otherwise
    """
    batch = cfg.get('batch', {})

    split_threshold = batch.get('split_threshold', DEFAULT_SPLIT_THRESHOLD)
    if not _is_positive_int(split_threshold):
        logger.error(f"batch.split_threshold must be a positive integer, got {split_threshold!r}")
        return False

    max_workers = batch.get('max_workers')
    if max_workers is not None and not _is_positive_int(max_workers):
        logger.error(f"batch.max_workers must be a positive integer, got {max_workers!r}")
        return False

    canny = cfg.get('canny', {})
    for key in ('low', 'high'):
        if _parse_threshold(canny.get(key)) is None:
            logger.error(f"canny.{key} must be a non-negative number, got {canny.get(key)!r}")
            return False

    # Soft ranges: warn only
    numeric_checks = [
        ('canny', 'low', 0.0, 1000.0),
        ('canny', 'high', 0.0, 1000.0),
        ('batch', 'split_threshold', 1, 1024),
    ]

    for section, key, min_val, max_val in numeric_checks:
        value = cfg.get(section, {}).get(key)
        if value is not None and not (min_val <= float(value) <= max_val):
            logger.warning(f"Parameter {section}.{key}={value} outside range [{min_val}, {max_val}]")

    return True
