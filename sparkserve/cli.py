"""
CLI interface for sparkserve.

Starts the HTTP server and inspects the preset directory.

Every option can also be given through its environment variable (see
sparkserve.config); flags take precedence over the environment.
"""

from pathlib import Path

import click
import yaml

from sparkserve import __version__
from sparkserve.errors import ConfigError


@click.group()
@click.version_option(version=__version__, prog_name="sparkserve")
@click.option("--spark-home", type=click.Path(path_type=Path), help="Spark home directory [SPARK_HOME]")
@click.option("--conf-dir", type=click.Path(path_type=Path), help="Directory with spark configuration presets [SPARK_CONF_DIR]")
@click.option("--master", help="Spark master address [SPARK_MASTER]")
@click.option("--debug-submit", is_flag=True, help="Write spark-submit output to the log [DEBUG_SPARK_SUBMIT]")
@click.option("--dev-mode", is_flag=True, help="Human-readable log output")
@click.option("--debug", is_flag=True, help="Enable debug logs [DEBUG]")
@click.option("--env-file", type=click.Path(path_type=Path), help="Load environment variables from a dotenv file")
@click.pass_context
def main(ctx, spark_home, conf_dir, master, debug_submit, dev_mode, debug, env_file):
    """
    sparkserve - HTTP control surface for spark-submit.

    Submit presets, query and kill spark drivers over HTTP.
    """
    from sparkserve.config import load_config

    ctx.ensure_object(dict)
    try:
        ctx.obj["config"] = load_config(
            env_file=env_file,
            spark_home=spark_home,
            conf_dir=conf_dir,
            master=master,
            debug_submit=debug_submit or None,
            dev_mode=dev_mode or None,
            debug=debug or None,
        )
    except ConfigError as e:
        # Reported by the command that needs the config
        ctx.obj["config_error"] = str(e)


def _require_config(ctx):
    if "config" not in ctx.obj:
        click.echo(f"✗ Config not loaded: {ctx.obj.get('config_error', 'Unknown error')}", err=True)
        raise SystemExit(1)
    return ctx.obj["config"]


def _load_registry(config):
    from sparkserve.registry import PresetRegistry

    try:
        return PresetRegistry.load(config.conf_dir)
    except ConfigError as e:
        click.echo(f"✗ {e}", err=True)
        raise SystemExit(1)


@main.command("serve")
@click.option("--host", default=None, help="Bind address [SPARKSERVE_HOST]")
@click.option("--port", type=int, default=None, help="Bind port [SPARKSERVE_PORT]")
@click.pass_context
def serve(ctx, host, port):
    """
    Start the web server.

    Examples:

        sparkserve --conf-dir ./presets --master k8s://https://kube:6443 serve

        SPARK_CONF_DIR=./presets SPARK_MASTER=local sparkserve serve --port 8080
    """
    import logging

    import uvicorn

    from sparkserve.metrics import InMemoryMetrics
    from sparkserve.server import create_app
    from sparkserve.spark import SparkSubmitter
    from sparkserve.utils import setup_logging

    config = _require_config(ctx)
    logger = setup_logging(config.log_level, dev_mode=config.dev_mode)

    metrics = InMemoryMetrics()
    try:
        submitter = SparkSubmitter.from_config(config, metrics=metrics, logger=logger)
    except ConfigError as e:
        logger.critical(f"couldn't initialize spark dependency: {e}", extra={"event": "startup_failed"})
        click.echo(f"✗ {e}", err=True)
        raise SystemExit(1)

    app = create_app(submitter, metrics=metrics, logger=logger)
    bind_host = host or config.host
    bind_port = port or config.port
    logger.info(f"start http server on {bind_host}:{bind_port}", extra={"event": "server_starting"})
    uvicorn.run(
        app,
        host=bind_host,
        port=bind_port,
        log_level=logging.getLevelName(logger.level).lower(),
    )


@main.group("presets")
def presets_group():
    """Inspect spark configuration presets."""
    pass


@presets_group.command("list")
@click.pass_context
def list_presets(ctx):
    """List loaded presets."""
    config = _require_config(ctx)
    registry = _load_registry(config)
    for name in registry.names():
        click.echo(name)


@presets_group.command("show")
@click.argument("name")
@click.pass_context
def show_preset(ctx, name: str):
    """Show a preset and the spark-submit command it produces."""
    from sparkserve.commands import build_submit_args
    from sparkserve.errors import PresetNotFoundError

    config = _require_config(ctx)
    registry = _load_registry(config)
    try:
        preset = registry.lookup(name)
    except PresetNotFoundError:
        click.echo(f"✗ Unknown preset: {name}", err=True)
        click.echo("\nAvailable presets:", err=True)
        for preset_name in registry.names():
            click.echo(f"  {preset_name}", err=True)
        raise SystemExit(1)

    args = build_submit_args(config.master, name, preset)
    click.echo(f"Preset: {name}")
    click.echo(f"Definition: {config.conf_dir / (name + '.yaml')}")
    click.echo()
    click.echo(yaml.safe_dump(preset.to_dict(), sort_keys=False).rstrip())
    click.echo()
    click.echo("Command:")
    click.echo(" ".join([str(config.launcher_path), *args]))


if __name__ == "__main__":
    main()
