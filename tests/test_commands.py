"""Tests for spark-submit argument builders."""

import pytest

from conftest import MASTER
from sparkserve.commands import build_control_args, build_submit_args
from sparkserve.schemas import Preset


@pytest.fixture
def preset():
    return Preset(
        name="pi",
        main="local:///opt/spark/examples/jars/spark-examples.jar",
        args=("1000", "--verbose"),
        spark_conf={
            "spark.executor.instances": "2",
            "spark.kubernetes.namespace": "spark",
            "spark.kubernetes.container.image": "apache/spark:3.5.0",
        },
    )


class TestBuildSubmitArgs:

    def test_leading_tokens(self, preset):
        args = build_submit_args(MASTER, "pi", preset)
        assert args[:3] == [
            f"--master={MASTER}",
            "--deploy-mode=cluster",
            "--name=pi",
        ]

    def test_one_conf_token_per_entry(self, preset):
        args = build_submit_args(MASTER, "pi", preset)
        conf_tokens = args[3:3 + len(preset.spark_conf)]

        # Order among conf entries is not significant
        assert set(conf_tokens) == {
            "--conf=spark.executor.instances=2",
            "--conf=spark.kubernetes.namespace=spark",
            "--conf=spark.kubernetes.container.image=apache/spark:3.5.0",
        }
        assert len(conf_tokens) == len(set(conf_tokens))

    def test_main_then_args_in_order(self, preset):
        args = build_submit_args(MASTER, "pi", preset)
        tail = args[3 + len(preset.spark_conf):]
        assert tail == [preset.main, "1000", "--verbose"]

    def test_total_length(self, preset):
        args = build_submit_args(MASTER, "pi", preset)
        assert len(args) == 3 + len(preset.spark_conf) + 1 + len(preset.args)

    def test_name_comes_from_argument(self, preset):
        args = build_submit_args(MASTER, "renamed", preset)
        assert args[2] == "--name=renamed"

    def test_no_conf_no_args(self):
        bare = Preset(name="bare", main="app.py")
        assert build_submit_args("local", "bare", bare) == [
            "--master=local",
            "--deploy-mode=cluster",
            "--name=bare",
            "app.py",
        ]

    def test_conf_value_containing_equals(self):
        preset = Preset(name="p", main="app.py", spark_conf={"spark.driver.extraJavaOptions": "-Da=b"})
        args = build_submit_args("local", "p", preset)
        assert "--conf=spark.driver.extraJavaOptions=-Da=b" in args


class TestBuildControlArgs:

    def test_status(self):
        assert build_control_args(MASTER, "status", "ns", "job") == [
            f"--master={MASTER}",
            "--status=ns:job",
        ]

    def test_kill(self):
        assert build_control_args(MASTER, "kill", "ns", "job") == [
            f"--master={MASTER}",
            "--kill=ns:job",
        ]

    def test_wildcard_name(self):
        assert build_control_args("local", "status", "spark", "*")[1] == "--status=spark:*"

    def test_unknown_verb(self):
        with pytest.raises(ValueError):
            build_control_args(MASTER, "restart", "ns", "job")
