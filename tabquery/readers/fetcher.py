"""
Resource loader - fetch the bytes behind a Locator

Supports:
- HTTP/HTTPS URLs via httpx, with retries and exponential backoff
- Local paths and file:// URLs
- A shared time-to-live cache to avoid re-downloads

Transient failures (timeouts, dropped connections, 5xx responses) are
retried; 4xx responses, missing files and unknown schemes fail at once.
Bytes are only returned, and cached, after the body has been read in full.
"""

from __future__ import annotations

import functools
import logging
from typing import Optional

import anyio
import httpx

from tabquery.core.config import LoaderConfig
from tabquery.core.errors import LoadError
from tabquery.readers.cache import ResourceCache, default_cache
from tabquery.readers.locator import Locator

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class _TransientFailure(Exception):
    """A failed attempt that is worth retrying"""

    pass


async def load(
    locator: Locator,
    config: Optional[LoaderConfig] = None,
    cache: Optional[ResourceCache] = default_cache,
    client: Optional[httpx.AsyncClient] = None,
) -> bytes:
    """
    Load a resource, consulting the cache first

    Args:
        locator: Resolved locator
        config: Fetch policy (default: LoaderConfig.from_env())
        cache: Cache to read and populate, or None to bypass caching
        client: Optional httpx client to reuse for remote locators

    Returns:
        The complete resource content

    Raises:
        LoadError: On permanent failure, or transient failure after retries
    """
    if config is None:
        config = LoaderConfig.from_env()

    use_cache = cache is not None and config.cache_ttl > 0
    if use_cache:
        cached = cache.get(locator)
        if cached is not None:
            logger.debug("Cache hit for %s (%d bytes)", locator, len(cached))
            return cached

    data = await fetch(locator, config, client=client)

    if use_cache:
        cache.put(locator, data, config.cache_ttl)
    return data


def load_sync(
    locator: Locator,
    config: Optional[LoaderConfig] = None,
    cache: Optional[ResourceCache] = default_cache,
) -> bytes:
    """Blocking version of load(), runs it on a fresh event loop"""
    return anyio.run(functools.partial(load, locator, config=config, cache=cache))


async def fetch(
    locator: Locator,
    config: LoaderConfig,
    client: Optional[httpx.AsyncClient] = None,
) -> bytes:
    """Fetch a resource without touching the cache"""
    if locator.is_local:
        return await _read_file(locator, config)
    if locator.is_remote:
        return await _fetch_url(locator, config, client)
    raise LoadError(
        f"Unsupported scheme '{locator.scheme}' in {locator}. Supported: http, https, file",
        location=locator.location,
    )


async def _read_file(locator: Locator, config: LoaderConfig) -> bytes:
    path = locator.path
    try:
        with anyio.fail_after(config.timeout):
            data = await anyio.Path(path).read_bytes()
    except FileNotFoundError as e:
        raise LoadError(f"File not found: {path}", location=locator.location) from e
    except TimeoutError as e:
        raise LoadError(
            f"Reading {path} timed out after {config.timeout}s", location=locator.location
        ) from e
    except OSError as e:
        raise LoadError(f"Cannot read {path}: {e}", location=locator.location) from e

    logger.debug("Read %d bytes from %s", len(data), path)
    return data


async def _fetch_url(
    locator: Locator,
    config: LoaderConfig,
    client: Optional[httpx.AsyncClient] = None,
) -> bytes:
    attempts = config.retries + 1
    owns_client = client is None
    if owns_client:
        client = httpx.AsyncClient(
            follow_redirects=True,
            timeout=config.timeout,
            headers={"User-Agent": config.user_agent},
        )

    last_error: Optional[BaseException] = None
    try:
        for attempt in range(attempts):
            try:
                data = await _attempt(client, locator, config)
                logger.debug("Downloaded %d bytes from %s", len(data), locator)
                return data
            except _TransientFailure as e:
                last_error = e.__cause__ or e
                reason = str(e)

            if attempt + 1 < attempts:
                delay = config.backoff * (2**attempt)
                logger.warning(
                    "Fetching %s failed (%s), retrying in %.2fs (attempt %d/%d)",
                    locator,
                    reason,
                    delay,
                    attempt + 1,
                    attempts,
                )
                await anyio.sleep(delay)
    finally:
        if owns_client:
            await client.aclose()

    raise LoadError(
        f"Failed to fetch {locator} after {attempts} attempt(s): {reason}",
        location=locator.location,
        attempts=attempts,
    ) from last_error


async def _attempt(client: httpx.AsyncClient, locator: Locator, config: LoaderConfig) -> bytes:
    """One GET; the body is buffered completely before it is returned"""
    try:
        with anyio.fail_after(config.timeout):
            async with client.stream("GET", locator.location) as response:
                status = response.status_code
                if status >= 500:
                    raise _TransientFailure(f"HTTP {status}")
                if status >= 400:
                    raise LoadError(
                        f"Failed to fetch {locator}: HTTP {status}", location=locator.location
                    )

                body = bytearray()
                async for chunk in response.aiter_bytes(chunk_size=CHUNK_SIZE):
                    body.extend(chunk)
                return bytes(body)

    except TimeoutError as e:
        raise _TransientFailure(f"timed out after {config.timeout}s") from e
    except httpx.InvalidURL as e:
        raise LoadError(f"Invalid URL {locator}: {e}", location=locator.location) from e
    except httpx.UnsupportedProtocol as e:
        raise LoadError(f"Unsupported URL {locator}: {e}", location=locator.location) from e
    except httpx.TransportError as e:
        raise _TransientFailure(f"{type(e).__name__}: {e}") from e
