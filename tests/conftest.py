import logging
import stat
from pathlib import Path

import pytest
import yaml

PI_PRESET = {
    "main": "local:///opt/spark/examples/jars/spark-examples.jar",
    "args": ["1000"],
    "sparkConf": {
        "spark.kubernetes.container.image": "apache/spark:3.5.0",
        "spark.executor.instances": "2",
        "spark.kubernetes.namespace": "spark",
    },
}

MASTER = "k8s://https://kubernetes.default.svc:443"


def write_preset(directory: Path, filename: str, data) -> Path:
    """Write a preset document (dict or raw text) into directory."""
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / filename
    if isinstance(data, str):
        path.write_text(data)
    else:
        path.write_text(yaml.safe_dump(data))
    return path


def write_launcher(spark_home: Path, body: str) -> Path:
    """Create an executable /bin/sh spark-submit stand-in under spark_home/bin."""
    launcher = spark_home / "bin" / "spark-submit"
    launcher.parent.mkdir(parents=True, exist_ok=True)
    launcher.write_text("#!/bin/sh\n" + body + "\n")
    launcher.chmod(launcher.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return launcher


def run_now(target, name):
    """Spawn replacement that runs background work inline."""
    target()


@pytest.fixture
def preset_dir(tmp_path):
    """Preset directory containing pi.yaml."""
    directory = tmp_path / "presets"
    write_preset(directory, "pi.yaml", PI_PRESET)
    return directory


@pytest.fixture
def spark_home(tmp_path):
    """Spark home with a launcher that records its arguments and succeeds."""
    home = tmp_path / "spark"
    record = tmp_path / "launcher-args.txt"
    write_launcher(home, f'for a in "$@"; do printf "%s\\n" "$a" >> "{record}"; done')
    return home


@pytest.fixture
def test_logger():
    """A propagating logger so caplog sees component output."""
    logger = logging.getLogger("tests.sparkserve")
    logger.setLevel(logging.DEBUG)
    return logger
