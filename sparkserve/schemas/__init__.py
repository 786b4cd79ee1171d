"""
sparkserve.schemas - Data structures loaded from the preset directory.
"""

from .preset import Preset, PresetValidationError

__all__ = [
    "Preset",
    "PresetValidationError",
]
