from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

import pydantic as pd
import typer
import urllib3

from kimspect import formatters as concrete_formatters  # noqa: F401
from kimspect.core.abstract import formatters
from kimspect.core.exceptions import ValidationError
from kimspect.core.models.config import Config
from kimspect.core.models.selector import OutputMode, ResourceKind
from kimspect.core.runner import Runner
from kimspect.utils.logging import LogFormat
from kimspect.utils.version import get_version

app = typer.Typer(
    pretty_exceptions_show_locals=False,
    pretty_exceptions_short=True,
    no_args_is_help=True,
    help="Inspect labels, annotations and env vars of pods and nodes in a Kubernetes cluster.",
)
get_app = typer.Typer(no_args_is_help=True, help="Display one or many resources.")
app.add_typer(get_app, name="get")

# NOTE: Disable insecure request warnings, as it might be expected to use self-signed certificates inside the cluster
urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

logger = logging.getLogger("kimspect")


@app.command(rich_help_panel="Utils")
def version() -> None:
    typer.echo(get_version())


def _run(kind: ResourceKind, config_options: dict[str, Any], selector_options: dict[str, Any]) -> None:
    try:
        # Options left unset fall back to KIMSPECT_* environment variables and defaults
        config = Config(**{key: value for key, value in config_options.items() if value is not None})
    except pd.ValidationError:
        logger.exception("Error occured while parsing arguments")
        raise typer.Exit(code=ValidationError.exit_code)

    config.configure_logging()

    runner = Runner(config)
    exit_code = asyncio.run(runner.run(kind, **selector_options))
    raise typer.Exit(code=exit_code)


@get_app.command("pods")
def get_pods(
    namespace: Optional[str] = typer.Option(
        None,
        "--namespace",
        "-n",
        help="Namespace to query. Defaults to the namespace of the current kubeconfig context.",
        rich_help_panel="Filters",
    ),
    all_namespaces: bool = typer.Option(
        False, "--all-namespaces", "-A", help="Query pods across all namespaces.", rich_help_panel="Filters"
    ),
    node: Optional[str] = typer.Option(
        None, "--node", "-N", help="Only show pods scheduled on this node.", rich_help_panel="Filters"
    ),
    pod: Optional[str] = typer.Option(None, "--pod", "-p", help="Only show the pod with this name.", rich_help_panel="Filters"),
    output: OutputMode = typer.Option(
        OutputMode.normal,
        "--output",
        "-o",
        help="Output mode. wide shows additional columns.",
        rich_help_panel="Output Settings",
    ),
    labels: bool = typer.Option(
        False, "--labels", help="Show one column per label key.", rich_help_panel="Output Settings"
    ),
    annotations: bool = typer.Option(
        False, "--annotations", help="Show one column per annotation key.", rich_help_panel="Output Settings"
    ),
    env_vars: Optional[str] = typer.Option(
        None,
        "--env-vars",
        help="Show env vars of the containers whose name matches this regex. Prefix it with ! to invert the match.",
        rich_help_panel="Output Settings",
    ),
    format: str = typer.Option(
        "text",
        "--format",
        "-f",
        help=f"Output formatter ({', '.join(formatters.list_available())})",
        rich_help_panel="Output Settings",
    ),
    width: Optional[int] = typer.Option(
        None,
        "--width",
        help="Width of the output of the table formatter. Will use console width by default.",
        rich_help_panel="Output Settings",
    ),
    kubeconfig: Optional[str] = typer.Option(
        None,
        "--kubeconfig",
        "-k",
        help="Path to kubeconfig file. If not provided, will attempt to find it.",
        rich_help_panel="Kubernetes Settings",
    ),
    context: Optional[str] = typer.Option(
        None, "--context", help="Kubeconfig context to use.", rich_help_panel="Kubernetes Settings"
    ),
    request_timeout: Optional[float] = typer.Option(
        None,
        "--request-timeout",
        help="Seconds to wait for the Kubernetes API before giving up, 0 waits forever. Defaults to 60.",
        rich_help_panel="Kubernetes Settings",
    ),
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase verbosity, repeat up to 4 times (-vvvv).",
        rich_help_panel="Logging Settings",
    ),
    log_format: LogFormat = typer.Option(
        LogFormat.text, "--log-format", help="Format of the logs written to stderr.", rich_help_panel="Logging Settings"
    ),
) -> None:
    """List pods with their labels, annotations or env vars."""

    _run(
        ResourceKind.Pod,
        dict(
            kubeconfig=kubeconfig,
            context=context,
            request_timeout=request_timeout,
            verbose=verbose,
            log_format=log_format,
            format=format,
            width=width,
        ),
        dict(
            namespace=namespace,
            all_namespaces=all_namespaces,
            name=pod,
            node=node,
            show_labels=labels,
            show_annotations=annotations,
            output_mode=output,
            env_vars=env_vars,
        ),
    )


@get_app.command("nodes")
def get_nodes(
    name: Optional[str] = typer.Option(None, "--name", help="Only show the node with this name.", rich_help_panel="Filters"),
    output: OutputMode = typer.Option(
        OutputMode.normal,
        "--output",
        "-o",
        help="Output mode. wide shows additional columns.",
        rich_help_panel="Output Settings",
    ),
    labels: bool = typer.Option(
        False, "--labels", help="Show one column per label key.", rich_help_panel="Output Settings"
    ),
    annotations: bool = typer.Option(
        False, "--annotations", help="Show one column per annotation key.", rich_help_panel="Output Settings"
    ),
    format: str = typer.Option(
        "text",
        "--format",
        "-f",
        help=f"Output formatter ({', '.join(formatters.list_available())})",
        rich_help_panel="Output Settings",
    ),
    width: Optional[int] = typer.Option(
        None,
        "--width",
        help="Width of the output of the table formatter. Will use console width by default.",
        rich_help_panel="Output Settings",
    ),
    kubeconfig: Optional[str] = typer.Option(
        None,
        "--kubeconfig",
        "-k",
        help="Path to kubeconfig file. If not provided, will attempt to find it.",
        rich_help_panel="Kubernetes Settings",
    ),
    context: Optional[str] = typer.Option(
        None, "--context", help="Kubeconfig context to use.", rich_help_panel="Kubernetes Settings"
    ),
    request_timeout: Optional[float] = typer.Option(
        None,
        "--request-timeout",
        help="Seconds to wait for the Kubernetes API before giving up, 0 waits forever. Defaults to 60.",
        rich_help_panel="Kubernetes Settings",
    ),
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase verbosity, repeat up to 4 times (-vvvv).",
        rich_help_panel="Logging Settings",
    ),
    log_format: LogFormat = typer.Option(
        LogFormat.text, "--log-format", help="Format of the logs written to stderr.", rich_help_panel="Logging Settings"
    ),
) -> None:
    """List nodes with their labels or annotations."""

    _run(
        ResourceKind.Node,
        dict(
            kubeconfig=kubeconfig,
            context=context,
            request_timeout=request_timeout,
            verbose=verbose,
            log_format=log_format,
            format=format,
            width=width,
        ),
        dict(
            name=name,
            show_labels=labels,
            show_annotations=annotations,
            output_mode=output,
        ),
    )


def run() -> None:
    app()


if __name__ == "__main__":
    run()
