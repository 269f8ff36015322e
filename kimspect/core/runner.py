import asyncio
import logging
import signal
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Optional

from rich.console import Console

from kimspect.core.abstract.client import BaseResourceClient
from kimspect.core.exceptions import KimspectError, MalformedResource, ValidationError
from kimspect.core.integrations.kubernetes import KubernetesResourceClient
from kimspect.core.models.config import Config
from kimspect.core.models.result import Result
from kimspect.core.models.selector import ResourceKind, build_selector
from kimspect.core.pipeline import query

logger = logging.getLogger("kimspect")


class Runner:
    """
    The command boundary: runs one query and turns every error into a message and an exit code.
    Output is printed only once the whole result is rendered.
    """

    def __init__(self, config: Config, client: Optional[BaseResourceClient] = None) -> None:
        self.config = config
        self._client = client
        self.cancel = asyncio.Event()

        # The blocking API call runs here so that the event loop can react to cancellation
        self._executor = ThreadPoolExecutor(max_workers=1)

    def _get_client(self) -> BaseResourceClient:
        if self._client is None:
            self._client = KubernetesResourceClient.from_config(self.config)
        return self._client

    def _print_result(self, result: Result) -> None:
        formatter = self.config.Formatter
        formatted = result.format(formatter)

        if formatter.rich_console:
            Console(width=self.config.width).print(formatted, overflow="ignore")
        else:
            print(formatted)

    async def _run(self, kind: ResourceKind, options: dict[str, Any]) -> None:
        selector = build_selector(kind, default_namespace=self.config.resolve_default_namespace(), **options)
        logger.debug(f"Selector: {selector}")

        result = await query(selector, self._get_client(), cancel=self.cancel, executor=self._executor)

        if not result.rows:
            logger.warning(f"No {kind.plural} found matching criteria")

        self._print_result(result)

    def _install_signal_handler(self) -> bool:
        try:
            asyncio.get_running_loop().add_signal_handler(signal.SIGINT, self.cancel.set)
        except (NotImplementedError, RuntimeError, ValueError):
            # Not supported on Windows or outside of the main thread, ctrl+c then stops the process as usual
            return False
        return True

    async def run(self, kind: ResourceKind, **options: Any) -> int:
        handles_signals = self._install_signal_handler()

        try:
            await self._run(kind, options)
        except MalformedResource as e:
            logger.error(f"{e} (kind: {e.kind or 'unknown'}, name: {e.name or 'unknown'})")
            return e.exit_code
        except ValidationError as e:
            logger.error(f"Invalid arguments: {e}")
            return e.exit_code
        except KimspectError as e:
            logger.error(str(e))
            logger.debug("Error details", exc_info=True)
            return e.exit_code
        finally:
            if handles_signals:
                asyncio.get_running_loop().remove_signal_handler(signal.SIGINT)
            self._executor.shutdown(wait=False)

        return 0
