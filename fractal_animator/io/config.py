"""
Loading and saving render configurations as JSON.
"""

import json
from dataclasses import asdict, fields
from pathlib import Path
from typing import Any, Dict, Union
import logging

from ..api import RenderConfig

logger = logging.getLogger(__name__)

_TUPLE_FIELDS = ('center', 'set_color')


def normalise_config(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Fill defaults into a raw configuration mapping and validate it.

    Args:
        data: Mapping loaded from JSON or built by hand

    Returns:
        Mapping with every RenderConfig field present
    """
    if not isinstance(data, dict):
        raise ValueError(f"Configuration must be a mapping, got {type(data).__name__}")

    known = {f.name for f in fields(RenderConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}. "
                         f"Available: {', '.join(sorted(known))}")

    normalised = asdict(RenderConfig())
    normalised.update(data)
    for name in _TUPLE_FIELDS:
        if isinstance(normalised[name], list):
            normalised[name] = tuple(normalised[name])

    RenderConfig(**normalised).validate()
    return normalised


def config_from_dict(data: Dict[str, Any]) -> RenderConfig:
    """Build a validated RenderConfig from a mapping."""
    return RenderConfig(**normalise_config(data))


def load_config(path: Union[str, Path]) -> RenderConfig:
    """
    Load a render configuration from a JSON file.

    Args:
        path: Path to the JSON file

    Returns:
        Validated RenderConfig
    """
    path = Path(path)
    with open(path, 'r') as f:
        data = json.load(f)

    logger.info(f"Loaded configuration from {path}")
    return config_from_dict(data)


def save_config(config: RenderConfig, path: Union[str, Path]) -> Path:
    """Write a render configuration as JSON."""
    path = Path(path)
    config.validate()
    with open(path, 'w') as f:
        json.dump(asdict(config), f, indent=2)

    logger.info(f"Saved configuration to {path}")
    return path
