"""
sparkserve - HTTP control surface for spark-submit

Submits named spark application presets to a cluster, and queries or kills
running drivers, by running the spark-submit launcher on behalf of callers.
"""

__version__ = "0.1.0"


__all__ = [
    "PresetRegistry",
    "ServerConfig",
    "SparkSubmitter",
    "load_config",
]

from .config import ServerConfig, load_config
from .registry import PresetRegistry
from .spark import SparkSubmitter
