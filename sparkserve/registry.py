"""
PresetRegistry - Load presets from a directory of YAML files.

The registry provides:
- A one-shot scan of a preset directory at startup
- Lookup of presets by name
- Inspection helpers for the CLI

The registry is read-only after loading and safe to share between threads.
"""

import logging
from pathlib import Path
from typing import Iterator, Optional

import yaml

from sparkserve.errors import (
    ConfigDirMissing,
    ConfigDirUnreadable,
    NoPresetsFound,
    PresetNotFoundError,
)
from sparkserve.schemas import Preset, PresetValidationError

LOGGER = logging.getLogger(__name__)

PRESET_SUFFIX = ".yaml"


class PresetRegistry:
    """
    Read-only mapping of preset name to Preset.

    Example directory structure:
        presets/
            pi.yaml          -> preset "pi"
            nightly-etl.yaml -> preset "nightly-etl"
            README.md        (ignored)
            archive/         (ignored, not scanned)
    """

    def __init__(self, presets: dict[str, Preset], source_dir: Optional[Path] = None):
        self._presets = dict(presets)
        self._source_dir = source_dir

    @property
    def source_dir(self) -> Optional[Path]:
        """Directory the presets were loaded from, if any."""
        return self._source_dir

    @classmethod
    def load(
        cls,
        source_dir: Path | str,
        logger: Optional[logging.Logger] = None,
    ) -> "PresetRegistry":
        """
        Scan a directory and register every valid preset in it.

        Files are processed in sorted order, so when two files map to the same
        preset name the later one wins deterministically. Unreadable or
        invalid files are skipped with a logged diagnostic. Scalars are kept as
        written in the file; YAML 1.1 implicit typing (010, yes, dates) is not applied.

        Args:
            source_dir: Directory containing <name>.yaml preset files
            logger: Logger for load diagnostics

        Returns:
            The populated registry

        Raises:
            ConfigDirMissing: If source_dir does not exist
            ConfigDirUnreadable: If source_dir cannot be listed
            NoPresetsFound: If no valid preset was found
        """
        log = logger or LOGGER
        source_dir = Path(source_dir)

        if not source_dir.is_dir():
            raise ConfigDirMissing(source_dir)

        try:
            entries = sorted(source_dir.iterdir(), key=lambda p: p.name)
        except OSError as e:
            raise ConfigDirUnreadable(source_dir, e) from e

        presets: dict[str, Preset] = {}
        for path in entries:
            if not path.name.endswith(PRESET_SUFFIX) or not path.is_file():
                continue

            preset = _load_preset(path, log)
            if preset is None:
                continue

            if preset.name in presets:
                log.warning(
                    f"duplicate preset {preset.name}, {path.name} replaces the earlier definition",
                    extra={"event": "preset_duplicate", "metadata": {"path": str(path)}},
                )
            presets[preset.name] = preset
            log.debug(f"loaded preset {preset.name}", extra={"event": "preset_loaded"})

        if not presets:
            raise NoPresetsFound(source_dir)

        log.info(
            f"presets initialized: {len(presets)}",
            extra={"event": "presets_initialized", "metadata": {"preset_count": len(presets)}},
        )
        return cls(presets, source_dir=source_dir)

    def lookup(self, name: str) -> Preset:
        """
        Get a preset by name.

        Raises:
            PresetNotFoundError: If no preset with this name is registered
        """
        try:
            return self._presets[name]
        except KeyError:
            raise PresetNotFoundError(name) from None

    def names(self) -> list[str]:
        """Sorted list of registered preset names."""
        return sorted(self._presets)

    def __contains__(self, name: object) -> bool:
        return name in self._presets

    def __iter__(self) -> Iterator[Preset]:
        for name in self.names():
            yield self._presets[name]

    def __len__(self) -> int:
        return len(self._presets)

    def __repr__(self) -> str:
        return f"PresetRegistry(source_dir={self._source_dir}, presets={len(self._presets)})"


def _load_preset(path: Path, log: logging.Logger) -> Optional[Preset]:
    """Read and validate a single preset file, or None if it must be skipped."""
    try:
        raw = path.read_text()
    except OSError as e:
        log.error(
            f"error reading preset {path}: {e}",
            extra={"event": "preset_unreadable", "metadata": {"path": str(path)}},
        )
        return None

    name = path.name[: -len(PRESET_SUFFIX)]
    try:
        return Preset.from_dict(name, yaml.load(raw, Loader=yaml.BaseLoader))
    except (yaml.YAMLError, PresetValidationError) as e:
        log.warning(
            f"couldn't parse preset {path}: {e}",
            extra={"event": "preset_invalid", "metadata": {"path": str(path)}},
        )
        return None
