"""
Configuration Loader

Loads YAML configuration files: request defaults and per-manufacturer
scraper configurations.
"""

from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml


def _get_config_dir() -> Path:
    """Get the config directory path."""
    # Try relative to this file first
    module_dir = Path(__file__).parent.parent.parent
    config_dir = module_dir / 'config'

    if config_dir.exists():
        return config_dir

    # Try current working directory
    cwd_config = Path.cwd() / 'config'
    if cwd_config.exists():
        return cwd_config

    raise FileNotFoundError(
        f"Config directory not found. Tried: {config_dir}, {cwd_config}"
    )


def load_config(filename: str) -> Dict[str, Any]:
    """
    Load a YAML configuration file from the config directory.

    Args:
        filename: Name of the config file (e.g., 'defaults.yaml')

    Returns:
        Parsed YAML content as dictionary

    Raises:
        FileNotFoundError: If config file doesn't exist
    """
    config_path = _get_config_dir() / filename

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    return load_yaml_file(config_path)


def load_yaml_file(path: Union[str, Path]) -> Dict[str, Any]:
    """Load any YAML file; an empty file yields an empty dict."""
    with open(path, 'r', encoding='utf-8') as f:
        return yaml.safe_load(f) or {}


def load_request_defaults() -> Dict[str, Any]:
    """
    Load request tuning defaults.

    Returns:
        Dictionary with delay_ms, timeout_ms and batch_size

    Example:
        {'delay_ms': 500, 'timeout_ms': 10000, 'batch_size': 5}
    """
    config = load_config('defaults.yaml')
    return config.get('request', {})


def load_max_runtime(default: float) -> float:
    """Whole-run budget in seconds from defaults.yaml, or default if unset."""
    config = load_config('defaults.yaml')
    return float(config.get('max_runtime_seconds', default))


def load_scraper_config(path: Union[str, Path], request_defaults: Optional[Dict[str, Any]] = None):
    """
    Load and validate a scraper configuration file.

    A bare filename is looked up under config/scrapers/. request_defaults
    fill in request settings the file leaves unset (generic configs only).

    Returns:
        Typed scraper configuration (see catalog_scraper.models.config)

    Raises:
        FileNotFoundError: If the file doesn't exist
        ConfigError: If the configuration is invalid
    """
    from ..models.config import parse_scraper_config

    config_path = Path(path)
    if not config_path.exists() and config_path.parent == Path('.'):
        config_path = _get_config_dir() / 'scrapers' / config_path.name

    if not config_path.exists():
        raise FileNotFoundError(f"Scraper config not found: {config_path}")

    data = load_yaml_file(config_path)
    if request_defaults and isinstance(data, dict) and data.get('type', 'html') == 'html':
        data['request'] = {**request_defaults, **(data.get('request') or {})}
    return parse_scraper_config(data)
