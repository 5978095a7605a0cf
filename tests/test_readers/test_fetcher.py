"""
Tests for the resource loader (local files and HTTP with retries)
"""

import anyio
import httpx
import pytest

from tabquery.core.config import LoaderConfig
from tabquery.core.errors import LoadError
from tabquery.readers.cache import ResourceCache
from tabquery.readers.fetcher import load, load_sync
from tabquery.readers.locator import resolve

CSV_BYTES = b"name,age\nAlice,30\nBob,25\n"
URL = "https://example.com/data.csv"


def make_client(responses):
    """
    Client whose transport replays the given responses in order

    Each entry is a status code or an exception instance to raise.
    """
    calls = []

    def handler(request):
        calls.append(request)
        outcome = responses[min(len(calls), len(responses)) - 1]
        if isinstance(outcome, Exception):
            raise outcome
        body = CSV_BYTES if outcome == 200 else b"error"
        return httpx.Response(outcome, content=body)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return client, calls


@pytest.fixture
def config():
    """Fast retries, caching enabled"""
    return LoaderConfig(timeout=5, retries=2, backoff=0, cache_ttl=60)


class TestRemoteLoad:
    """Test HTTP fetching"""

    @pytest.mark.anyio
    async def test_success(self, config):
        client, calls = make_client([200])
        async with client:
            data = await load(resolve(URL), config=config, cache=None, client=client)

        assert data == CSV_BYTES
        assert len(calls) == 1

    @pytest.mark.anyio
    async def test_retry_after_server_error(self, config):
        client, calls = make_client([503, 200])
        async with client:
            data = await load(resolve(URL), config=config, cache=None, client=client)

        assert data == CSV_BYTES
        assert len(calls) == 2

    @pytest.mark.anyio
    async def test_retry_after_connection_error(self, config):
        client, calls = make_client([httpx.ConnectError("connection refused"), 200])
        async with client:
            data = await load(resolve(URL), config=config, cache=None, client=client)

        assert data == CSV_BYTES
        assert len(calls) == 2

    @pytest.mark.anyio
    async def test_retries_exhausted(self, config):
        client, calls = make_client([500])
        async with client:
            with pytest.raises(LoadError, match="after 3 attempt\\(s\\): HTTP 500") as exc_info:
                await load(resolve(URL), config=config, cache=None, client=client)

        assert exc_info.value.attempts == 3
        assert exc_info.value.location == URL
        assert len(calls) == 3

    @pytest.mark.anyio
    async def test_retry_after_timeout(self):
        calls = []

        async def handler(request):
            calls.append(request)
            if len(calls) == 1:
                await anyio.sleep(5)
            return httpx.Response(200, content=CSV_BYTES)

        config = LoaderConfig(timeout=0.2, retries=1, backoff=0)
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            data = await load(resolve(URL), config=config, cache=None, client=client)

        assert data == CSV_BYTES
        assert len(calls) == 2

    @pytest.mark.anyio
    async def test_timeout_exhausts_retries(self):
        async def handler(request):
            await anyio.sleep(5)
            return httpx.Response(200, content=CSV_BYTES)

        config = LoaderConfig(timeout=0.1, retries=1, backoff=0)
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(LoadError, match="timed out after 0.1s") as exc_info:
                await load(resolve(URL), config=config, cache=None, client=client)

        assert exc_info.value.attempts == 2

    @pytest.mark.anyio
    async def test_client_error_not_retried(self, config):
        client, calls = make_client([404])
        async with client:
            with pytest.raises(LoadError, match="HTTP 404"):
                await load(resolve(URL), config=config, cache=None, client=client)

        assert len(calls) == 1

    @pytest.mark.anyio
    async def test_no_retries(self):
        client, calls = make_client([503, 200])
        config = LoaderConfig(retries=0, backoff=0)
        async with client:
            with pytest.raises(LoadError) as exc_info:
                await load(resolve(URL), config=config, cache=None, client=client)

        assert exc_info.value.attempts == 1
        assert len(calls) == 1

    @pytest.mark.anyio
    async def test_cache_hit_skips_fetch(self, config):
        cache = ResourceCache()
        client, calls = make_client([200])
        async with client:
            first = await load(resolve(URL), config=config, cache=cache, client=client)
            second = await load(resolve(URL), config=config, cache=cache, client=client)

        assert first == second == CSV_BYTES
        assert len(calls) == 1

    @pytest.mark.anyio
    async def test_failure_not_cached(self, config):
        cache = ResourceCache()
        client, _ = make_client([404])
        async with client:
            with pytest.raises(LoadError):
                await load(resolve(URL), config=config, cache=cache, client=client)

        assert len(cache) == 0

    @pytest.mark.anyio
    async def test_zero_ttl_disables_cache(self):
        cache = ResourceCache()
        config = LoaderConfig(backoff=0, cache_ttl=0)
        client, calls = make_client([200])
        async with client:
            await load(resolve(URL), config=config, cache=cache, client=client)
            await load(resolve(URL), config=config, cache=cache, client=client)

        assert len(calls) == 2
        assert len(cache) == 0


class TestLocalLoad:
    """Test reading local files"""

    @pytest.mark.anyio
    async def test_read_path(self, tmp_path, config):
        path = tmp_path / "data.csv"
        path.write_bytes(CSV_BYTES)

        assert await load(resolve(str(path)), config=config, cache=None) == CSV_BYTES

    @pytest.mark.anyio
    async def test_read_file_url(self, tmp_path, config):
        path = tmp_path / "data.csv"
        path.write_bytes(CSV_BYTES)

        assert await load(resolve(path.as_uri()), config=config, cache=None) == CSV_BYTES

    @pytest.mark.anyio
    async def test_missing_file(self, tmp_path, config):
        with pytest.raises(LoadError, match="File not found"):
            await load(resolve(str(tmp_path / "missing.csv")), config=config, cache=None)

    @pytest.mark.anyio
    async def test_unsupported_scheme(self, config):
        with pytest.raises(LoadError, match="Unsupported scheme 'ftp'"):
            await load(resolve("ftp://example.com/data.csv"), config=config, cache=None)

    def test_load_sync(self, tmp_path, config):
        path = tmp_path / "data.csv"
        path.write_bytes(CSV_BYTES)

        assert load_sync(resolve(str(path)), config=config, cache=ResourceCache()) == CSV_BYTES
