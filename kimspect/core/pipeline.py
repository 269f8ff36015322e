from __future__ import annotations

import asyncio
import logging
from concurrent.futures import Executor
from datetime import datetime
from typing import Any, Optional

from kimspect.core.abstract.client import BaseResourceClient
from kimspect.core.columns import derive_columns
from kimspect.core.exceptions import Cancelled
from kimspect.core.fetcher import ResourceFetcher
from kimspect.core.mapper import map_record
from kimspect.core.models.result import Result
from kimspect.core.models.selector import Selector

logger = logging.getLogger("kimspect")


async def _fetch(
    fetcher: ResourceFetcher,
    selector: Selector,
    cancel: Optional[asyncio.Event],
    executor: Optional[Executor],
) -> list[Any]:
    loop = asyncio.get_running_loop()
    fetch = loop.run_in_executor(executor, fetcher.fetch, selector)

    if cancel is None:
        return await fetch

    waiter = asyncio.ensure_future(cancel.wait())
    done, _ = await asyncio.wait({fetch, waiter}, return_when=asyncio.FIRST_COMPLETED)

    if waiter in done:
        # NOTE: The blocking call itself can not be interrupted, its result is dropped
        fetch.add_done_callback(lambda f: f.cancelled() or f.exception())
        fetch.cancel()
        raise Cancelled(
            "Cancelled while waiting for the Kubernetes API. The pending request still runs until it ends "
            "or times out, press Ctrl+C again to stop waiting for it"
        )

    waiter.cancel()
    return fetch.result()


async def query(
    selector: Selector,
    client: BaseResourceClient,
    *,
    cancel: Optional[asyncio.Event] = None,
    executor: Optional[Executor] = None,
    now: Optional[datetime] = None,
) -> Result:
    """Fetch what `selector` describes and shape it for rendering.

    The schema is derived after the fetch, since label and annotation keys are only
    known once the data arrived.

    Raises:
        Cancelled: if `cancel` is set before or during the fetch.
    """

    if cancel is not None and cancel.is_set():
        raise Cancelled("Cancelled before querying the Kubernetes API")

    records = await _fetch(ResourceFetcher(client), selector, cancel, executor)

    container_filter = selector.env_vars_filter.matches if selector.env_vars_filter is not None else None
    rows = [map_record(selector.kind, record, now=now, container_filter=container_filter) for record in records]
    columns = derive_columns(selector, rows)

    logger.debug(f"Rendering {len(rows)} rows with columns {[column.header for column in columns]}")
    return Result(kind=selector.kind, columns=columns, rows=rows)
