"""
Utility functions for I/O and configuration management
"""

from .config import (
    load_config, update_config, resolve_thresholds, validate_configuration,
    DEFAULT_THRESHOLDS
)
from .io import (
    resolve_input_files, read_image, validate_image, output_path_for
)

__all__ = [
    'load_config', 'update_config', 'resolve_thresholds',
    'validate_configuration', 'DEFAULT_THRESHOLDS',
    'resolve_input_files', 'read_image', 'validate_image', 'output_path_for'
]
