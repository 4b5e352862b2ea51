"""
Configuration constants for citegraph.
======================================

Default option values for every algorithm family. Functions use these
constants as their keyword defaults; ``load_config`` lets a caller
override them from a YAML file for use with ``engine.run_algorithm``.
"""

import copy
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

logger = logging.getLogger(__name__)

# Path finding / traversal
DEFAULT_DIRECTED = True
DEFAULT_EGO_RADIUS = 1

# Cohesion
DEFAULT_KTRUSS_K = 3
DEFAULT_STAR_MIN_DEGREE = 3
DEFAULT_CORE_THRESHOLD = 0.5

# Community detection
DEFAULT_COMMUNITY_ALGORITHM = "louvain"
DEFAULT_RESOLUTION = 1.0
DEFAULT_SEED = 42  # random state for networkx Louvain
MODULARITY_MIN_GAIN = 1e-7  # smallest modularity gain that counts as progress
LEIDEN_MAX_LEVELS = 20
LEIDEN_MAX_PASSES = 100  # local-move sweeps per level
HIERARCHICAL_WARN_NODES = 5000  # dense O(n^2) distance matrix beyond this

# Relational patterns
DEFAULT_MIN_COUNT = 2
DEFAULT_MIN_SHARED = 2

DEFAULTS: Dict[str, Any] = {
    "radius": DEFAULT_EGO_RADIUS,
    "k_truss": DEFAULT_KTRUSS_K,
    "min_degree": DEFAULT_STAR_MIN_DEGREE,
    "threshold": DEFAULT_CORE_THRESHOLD,
    "algorithm": DEFAULT_COMMUNITY_ALGORITHM,
    "resolution": DEFAULT_RESOLUTION,
    "seed": DEFAULT_SEED,
    "min_count": DEFAULT_MIN_COUNT,
    "min_shared": DEFAULT_MIN_SHARED,
}


def load_config(config_path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """
    Load option defaults, optionally overridden by a YAML file.

    Parameters
    ----------
    config_path : str or Path, optional
        YAML mapping of option name -> value. If None, the built-in
        defaults are returned.

    Returns
    -------
    Dict[str, Any]
        Option defaults

    Raises
    ------
    FileNotFoundError
        If ``config_path`` does not exist
    ValueError
        If the file is not a mapping or names an unknown option
    """
    config = copy.deepcopy(DEFAULTS)
    if config_path is None:
        return config

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        overrides = yaml.safe_load(f) or {}

    if not isinstance(overrides, dict):
        raise ValueError(f"Configuration must be a mapping, got {type(overrides).__name__}")

    unknown = sorted(set(overrides) - set(DEFAULTS))
    if unknown:
        raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")

    config.update(overrides)
    logger.debug(f"Loaded {len(overrides)} option overrides from {config_path}")
    return config
