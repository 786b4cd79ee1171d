"""
SparkSubmitter - submit, kill and query spark applications.

The facade composes the preset registry, the argument builders, the process
executor and the retry loop:

    submit(preset)   lookup -> build args -> dispatch retry loop -> return
    kill(ns, name)   build args -> dispatch one run -> return
    status(ns, name) build args -> run and wait -> captured output

submit and kill return as soon as the background thread is started. Nothing
about the background run is reported back to the caller; outcomes go to the
log and the metrics collaborator only.
"""

import logging
import threading
from typing import Callable, Optional

from sparkserve.commands import build_control_args, build_submit_args
from sparkserve.config import ServerConfig
from sparkserve.errors import LauncherError, LauncherNotFound, RetriesExceeded
from sparkserve.executor import ProcessExecutor
from sparkserve.metrics import FAILURE, SUCCESS, NoOpMetrics, SubmitMetrics
from sparkserve.registry import PresetRegistry
from sparkserve.retry import RetryPolicy, run_with_policy

LOGGER = logging.getLogger(__name__)

Spawn = Callable[[Callable[[], None], str], None]


def spawn_thread(target: Callable[[], None], name: str) -> None:
    """Run target on a detached daemon thread."""
    thread = threading.Thread(target=target, name=name, daemon=True)
    thread.start()


class SparkSubmitter:
    """
    Facade used by the HTTP layer.

    Usage:
        registry = PresetRegistry.load("/etc/spark-presets")
        executor = ProcessExecutor("/opt/spark/bin/spark-submit")
        submitter = SparkSubmitter(registry, executor, master="k8s://https://kube:6443")

        submitter.submit("pi")
        print(submitter.status("spark", "*"))
    """

    def __init__(
        self,
        registry: PresetRegistry,
        executor: ProcessExecutor,
        master: str,
        retry_policy: Optional[RetryPolicy] = None,
        metrics: Optional[SubmitMetrics] = None,
        debug: bool = False,
        spawn: Optional[Spawn] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the submitter.

        Args:
            registry: Loaded presets
            executor: Runs the spark-submit binary
            master: Cluster master address passed as --master
            retry_policy: Retry settings for submissions
            metrics: Receives attempt and outcome counts
            debug: Stream submit/kill output into the log
            spawn: Starts background work, defaults to a daemon thread
            logger: Logger for submission events
        """
        self._registry = registry
        self._executor = executor
        self._master = master
        self._retry_policy = retry_policy or RetryPolicy()
        self._metrics = metrics or NoOpMetrics()
        self._debug = debug
        self._spawn = spawn or spawn_thread
        self._logger = logger or LOGGER

    @classmethod
    def from_config(
        cls,
        config: ServerConfig,
        metrics: Optional[SubmitMetrics] = None,
        logger: Optional[logging.Logger] = None,
    ) -> "SparkSubmitter":
        """
        Build a submitter from process configuration.

        Raises:
            LauncherNotFound: If spark home or the spark-submit binary is missing
            ConfigDirMissing, ConfigDirUnreadable, NoPresetsFound: From preset loading
        """
        if not config.spark_home.is_dir():
            raise LauncherNotFound(config.spark_home)
        if not config.launcher_path.is_file():
            raise LauncherNotFound(config.launcher_path)

        registry = PresetRegistry.load(config.conf_dir, logger=logger)
        executor = ProcessExecutor(config.launcher_path, logger=logger)
        return cls(
            registry,
            executor,
            master=config.master,
            retry_policy=config.retry,
            metrics=metrics,
            debug=config.debug_submit,
            logger=logger,
        )

    @property
    def presets(self) -> PresetRegistry:
        return self._registry

    @property
    def master(self) -> str:
        return self._master

    def submit_args(self, preset_name: str) -> list[str]:
        """
        Launcher arguments for submitting a preset.

        Raises:
            PresetNotFoundError: If the preset is not registered
        """
        preset = self._registry.lookup(preset_name)
        return build_submit_args(self._master, preset_name, preset)

    def submit(self, preset_name: str) -> None:
        """
        Submit a preset in the background and return immediately.

        Raises:
            PresetNotFoundError: If the preset is not registered
        """
        args = self.submit_args(preset_name)
        self._logger.info(
            f"submit {preset_name}",
            extra={"event": "submit_dispatched", "metadata": {"preset": preset_name, "args": args}},
        )
        self._spawn(lambda: self._submit_with_retry(preset_name, args), f"submit-{preset_name}")

    def _submit_with_retry(self, preset_name: str, args: list[str]) -> None:
        def attempt() -> None:
            self._metrics.record_attempt(preset_name)
            self._executor.run(args, stream_output=self._debug)

        try:
            run_with_policy(attempt, self._retry_policy, logger=self._logger)
        except RetriesExceeded as e:
            self._logger.error(
                f"spark submit failed with retries: {preset_name}: {e.last_error}",
                extra={"event": "submit_failed", "metadata": {"preset": preset_name}},
            )
            self._metrics.record_outcome(preset_name, FAILURE)
            return

        self._logger.info(
            f"spark submit succeeded: {preset_name}",
            extra={"event": "submit_succeeded", "metadata": {"preset": preset_name}},
        )
        self._metrics.record_outcome(preset_name, SUCCESS)

    def kill(self, namespace: str, name: str) -> None:
        """Kill a remote driver in the background; failures are only logged."""
        args = build_control_args(self._master, "kill", namespace, name)
        self._spawn(lambda: self._kill(args), f"kill-{namespace}:{name}")

    def _kill(self, args: list[str]) -> None:
        try:
            self._executor.run(args, stream_output=self._debug)
        except LauncherError as e:
            self._logger.error(
                f"killing spark app failed: {e}",
                extra={"event": "kill_failed", "metadata": {"args": args}},
            )

    def status(self, namespace: str, name: str) -> str:
        """
        Query the status of remote drivers.

        Blocks until spark-submit exits. The combined launcher output is
        returned as-is, also when the launcher fails.
        """
        args = build_control_args(self._master, "status", namespace, name)
        try:
            return self._executor.run(args, capture_output=True)
        except LauncherError as e:
            self._logger.error(
                f"spark-submit status failed: {e}",
                extra={"event": "status_failed", "metadata": {"args": args}},
            )
            return e.output

    def __repr__(self) -> str:
        return f"SparkSubmitter(master={self._master}, presets={len(self._registry)})"
