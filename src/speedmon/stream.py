from typing import AsyncIterable, AsyncIterator

import asyncio
import aiohttp

from .exceptions import StreamFault


async def fixed_size_chunks(chunks: AsyncIterable[bytes], chunk_size: int) -> AsyncIterator[bytes]:
    """
    Re-block a byte stream into chunks of exactly `chunk_size` bytes.

    aiohttp's iter_chunked only guarantees chunks of *at most* the requested
    size. Only the last chunk yielded may be shorter.
    """

    if chunk_size <= 0:
        raise ValueError(f"Chunk size must be positive, {chunk_size=}")

    buffer = bytearray()
    async for chunk in chunks:
        buffer.extend(chunk)
        while len(buffer) >= chunk_size:
            yield bytes(buffer[:chunk_size])
            del buffer[:chunk_size]

    if buffer:
        yield bytes(buffer)


async def read_response_chunks(resp: aiohttp.ClientResponse, chunk_size: int, url: str = None) -> AsyncIterator[bytes]:
    """
    Yield the response body in fixed-size chunks, translating transport errors to StreamFault.
    """

    if resp.content is None:
        raise StreamFault("Invalid response body", url=url)

    try:
        async for chunk in fixed_size_chunks(resp.content.iter_chunked(chunk_size), chunk_size):
            yield chunk
    except (aiohttp.ClientError, asyncio.TimeoutError) as err:
        raise StreamFault(f"{repr(err)}, {err}", url=url) from err


__all__ = ["fixed_size_chunks", "read_response_chunks"]
