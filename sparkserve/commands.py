"""
Argument builders for the spark-submit launcher.

Pure functions: given the cluster master address and a preset or a remote
job handle, produce the argument list passed to spark-submit.
"""

from sparkserve.schemas import Preset

DEPLOY_MODE = "cluster"
CONTROL_VERBS = ("kill", "status")


def build_submit_args(master: str, preset_name: str, preset: Preset) -> list[str]:
    """
    Build spark-submit arguments for submitting a preset.

    Layout:
        --master=<master> --deploy-mode=cluster --name=<preset_name>
        --conf=<key>=<value> ...  (one per spark_conf entry, order not significant)
        <main> <args...>
    """
    args = [
        f"--master={master}",
        f"--deploy-mode={DEPLOY_MODE}",
        f"--name={preset_name}",
    ]
    args.extend(f"--conf={key}={value}" for key, value in preset.spark_conf.items())
    args.append(preset.main)
    args.extend(preset.args)
    return args


def build_control_args(master: str, verb: str, namespace: str, name: str) -> list[str]:
    """
    Build spark-submit arguments for a kill or status request.

    Args:
        master: Cluster master address
        verb: "kill" or "status"
        namespace: Namespace of the remote driver
        name: Driver name, may be the "*" wildcard

    Raises:
        ValueError: If verb is not a supported control verb
    """
    if verb not in CONTROL_VERBS:
        raise ValueError(f"unsupported control verb: {verb}")
    return [
        f"--master={master}",
        f"--{verb}={namespace}:{name}",
    ]
