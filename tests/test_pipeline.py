import asyncio
import threading

import pytest

from kimspect.core.exceptions import ApiError, Cancelled, NotFound
from kimspect.core.models.selector import EnvVarsFilter, ResourceKind, Selector
from kimspect.core.pipeline import query
from kimspect.formatters.text import text

from .conftest import NOW, FakeResourceClient, make_pod


@pytest.mark.asyncio
async def test_named_pod_with_labels():
    client = FakeResourceClient(pods=[make_pod("my-pod", labels={"app": "x"})])
    selector = Selector(kind=ResourceKind.Pod, namespace="default", name="my-pod", show_labels=True)

    result = await query(selector, client, now=NOW)

    assert result.records() == [{"NAME": "my-pod", "STATUS": "Running", "AGE": "3d4h", "APP": "x"}]
    assert client.calls == [("get_pod", "default", "my-pod")]


@pytest.mark.asyncio
async def test_empty_result_renders_header_only():
    selector = Selector(kind=ResourceKind.Pod, all_namespaces=True)

    result = await query(selector, FakeResourceClient(), now=NOW)

    assert result.rows == []
    assert text(result) == "NAME   NAMESPACE   STATUS   AGE"


@pytest.mark.asyncio
async def test_missing_pod_propagates_not_found():
    selector = Selector(kind=ResourceKind.Pod, namespace="default", name="ghost")

    with pytest.raises(NotFound):
        await query(selector, FakeResourceClient(pods=[make_pod("my-pod")]), now=NOW)


@pytest.mark.asyncio
async def test_api_errors_propagate_without_retry():
    client = FakeResourceClient(error=ApiError("connection refused"))

    with pytest.raises(ApiError):
        await query(Selector(kind=ResourceKind.Node), client, now=NOW)

    assert client.calls == [("list_nodes",)]


@pytest.mark.asyncio
async def test_env_vars_filter_reaches_the_rows(fake_client):
    selector = Selector(
        kind=ResourceKind.Pod, namespace="default", name="web-1", env_vars_filter=EnvVarsFilter.parse("^app$")
    )

    result = await query(selector, fake_client, now=NOW)

    assert result.rows[0].containers == {"app": {}}
    assert result.headers[-2:] == ["CONTAINERS", "ENV VARS"]


@pytest.mark.asyncio
async def test_cancelled_before_fetch_makes_no_call(fake_client):
    cancel = asyncio.Event()
    cancel.set()

    with pytest.raises(Cancelled):
        await query(Selector(kind=ResourceKind.Node), fake_client, cancel=cancel)

    assert fake_client.calls == []


class BlockingClient(FakeResourceClient):
    def __init__(self) -> None:
        super().__init__()
        self.started = threading.Event()
        self.release = threading.Event()

    def list_nodes(self) -> list:
        self.started.set()
        self.release.wait(timeout=5)
        return super().list_nodes()


@pytest.mark.asyncio
async def test_cancelled_during_fetch():
    client = BlockingClient()
    cancel = asyncio.Event()

    async def fire() -> None:
        await asyncio.get_running_loop().run_in_executor(None, client.started.wait, 5)
        cancel.set()

    firing = asyncio.ensure_future(fire())
    try:
        with pytest.raises(Cancelled, match=r"Ctrl\+C again"):
            await query(Selector(kind=ResourceKind.Node), client, cancel=cancel)
    finally:
        client.release.set()
        await firing


@pytest.mark.asyncio
async def test_cancel_signal_that_never_fires(fake_client):
    cancel = asyncio.Event()

    result = await query(Selector(kind=ResourceKind.Node), fake_client, cancel=cancel, now=NOW)

    assert [row.name for row in result.rows] == ["node-1", "node-2"]
