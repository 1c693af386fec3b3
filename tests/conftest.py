# File: tests/conftest.py
from pathlib import Path

import pytest
import pytest_asyncio
from aiohttp import web

from site_harvest.config import HarvestConfig


@pytest.fixture()
def harvest_config() -> HarvestConfig:
    """
    Fast settings for tests: short timeouts, static renderer, no retries.
    """
    return HarvestConfig(
        user_agent="TestAgent/1.0",
        navigation_timeout=2.0,
        fetch_timeout=2.0,
        retry_times=0,
        renderer="static",
    )


@pytest.fixture()
def manifest_file(tmp_path) -> Path:
    """
    A manifest as written by `discover`.
    """
    path = tmp_path / "manifest-site.test.json"
    path.write_text(
        '{"totalUrls": 2, "urls": ["https://site.test/a", "https://site.test/b/"], '
        '"sections": {"/a/": 1, "/b/": 1}}',
        encoding="utf-8",
    )
    return path


@pytest_asyncio.fixture
async def serve_app(unused_tcp_port: int):
    """Start an aiohttp app on a free port, return its base URL, clean up after the test."""
    runners: list[web.AppRunner] = []

    async def _start(app: web.Application) -> str:
        runner = web.AppRunner(app)
        await runner.setup()
        site = web.TCPSite(runner, "localhost", unused_tcp_port)
        await site.start()
        runners.append(runner)
        return f"http://localhost:{unused_tcp_port}"

    yield _start
    for runner in runners:
        await runner.cleanup()
