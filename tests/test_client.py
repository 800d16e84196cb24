import asyncio
import logging
import socket

from aiohttp import web
from aiohttp.test_utils import TestServer

from downpour.client import AiohttpClient
from downpour.core import run
from downpour.models import Category, ProgramArgs


def _make_app():
    hits = {"count": 0}

    async def flaky(request):
        hits["count"] += 1
        if hits["count"] % 4 == 0:
            return web.Response(status=503, text="busy")
        return web.Response(text="x" * 2048)

    app = web.Application()
    app.router.add_get("/", flaky)
    return app, hits


def _free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


def test_run_against_local_server():
    async def scenario():
        app, hits = _make_app()
        async with TestServer(app) as server:
            url = str(server.make_url("/"))
            async with AiohttpClient(pool_size=5) as client:
                report = await run(ProgramArgs(url, concurrency=3, total_requests=12), client)
        return report, hits["count"]

    report, served = asyncio.run(scenario())

    assert served == 12
    assert report.success == 9
    assert report.per_category == {Category.HTTP: 3}
    assert report.per_status_code == {503: 3}


def test_refused_connection_is_classified():
    url = f"http://127.0.0.1:{_free_port()}/"

    async def scenario():
        async with AiohttpClient(pool_size=2, timeout_s=5.0) as client:
            return await run(ProgramArgs(url, concurrency=2, total_requests=3), client)

    report = asyncio.run(scenario())

    assert report.failed == 3
    assert report.per_category == {Category.CONNECTION_REFUSED: 3}


def test_get_requires_open_session():
    async def scenario():
        client = AiohttpClient()
        try:
            await client.get("http://127.0.0.1/")
        except RuntimeError as e:
            return str(e)
        return None

    assert "not open" in asyncio.run(scenario())


def test_large_bodies_are_drained_and_connection_reused(caplog):
    body = b"y" * (1024 * 1024 + 17)

    async def big(request):
        return web.Response(body=body)

    async def scenario():
        app = web.Application()
        app.router.add_get("/big", big)
        async with TestServer(app) as server:
            url = str(server.make_url("/big"))
            # One pooled connection: each body must be released before the next request
            async with AiohttpClient(pool_size=1, timeout_s=10.0) as client:
                return await run(ProgramArgs(url, concurrency=1, total_requests=4), client)

    with caplog.at_level(logging.DEBUG, logger="downpour.client"):
        report = asyncio.run(scenario())

    assert report.success == 4
    sizes = [r.getMessage() for r in caplog.records if "Fetched" in r.getMessage()]
    assert len(sizes) == 4
    assert all(f"size={len(body)} bytes" in m for m in sizes)
