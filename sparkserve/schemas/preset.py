"""
Preset schema - a named spark application definition.

A preset is the static, version-controlled description of one spark
application: its entry point, positional arguments and spark configuration
overrides. Presets are read from YAML documents of the form:

    main: local:///opt/spark/examples/jars/spark-examples.jar
    args: ["1000"]
    sparkConf:
      spark.executor.instances: "2"

Every value is a string. The registry parses documents without implicit
typing, so `010` or `yes` reach spark-submit exactly as written.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping


class PresetValidationError(Exception):
    """Raised when a preset document does not match the schema."""
    pass


def _require_str(value: Any, where: str) -> str:
    if not isinstance(value, str):
        raise PresetValidationError(f"{where}: expected a string, got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class Preset:
    """
    A spark application preset.

    Attributes:
        name: Registry key, the preset file name without its suffix
        main: Application entry point (jar or python file URI)
        args: Positional application arguments, passed after main
        spark_conf: Spark configuration overrides, one --conf per entry
            (read-only view)
    """
    name: str
    main: str
    args: tuple[str, ...] = field(default_factory=tuple)
    spark_conf: Mapping[str, str] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        if not self.name:
            raise PresetValidationError("preset name must not be empty")
        if not self.main:
            raise PresetValidationError(f"preset '{self.name}': missing 'main'")
        # Collection fields are stored as read-only copies
        object.__setattr__(self, "args", tuple(self.args))
        object.__setattr__(self, "spark_conf", MappingProxyType(dict(self.spark_conf)))

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the on-disk document shape."""
        return {
            "main": self.main,
            "args": list(self.args),
            "sparkConf": dict(self.spark_conf),
        }

    @classmethod
    def from_dict(cls, name: str, data: Any) -> "Preset":
        """
        Build a preset from a parsed YAML document.

        Args:
            name: Preset name (derived from the file name)
            data: Parsed document

        Returns:
            The validated Preset

        Raises:
            PresetValidationError: If the document does not match the schema
        """
        if not isinstance(data, dict):
            raise PresetValidationError(
                f"preset '{name}': expected a mapping, got {type(data).__name__}"
            )

        main = data.get("main")
        if not isinstance(main, str):
            raise PresetValidationError(f"preset '{name}': 'main' must be a string")

        raw_args = data.get("args") or []
        if not isinstance(raw_args, list):
            raise PresetValidationError(f"preset '{name}': 'args' must be a list")
        args = tuple(
            _require_str(arg, f"preset '{name}' args[{i}]")
            for i, arg in enumerate(raw_args)
        )

        raw_conf = data.get("sparkConf") or {}
        if not isinstance(raw_conf, dict):
            raise PresetValidationError(f"preset '{name}': 'sparkConf' must be a mapping")
        spark_conf = {
            _require_str(key, f"preset '{name}' sparkConf key"):
                _require_str(value, f"preset '{name}' sparkConf.{key}")
            for key, value in raw_conf.items()
        }

        return cls(name=name, main=main, args=args, spark_conf=spark_conf)
