"""aiohttp session helper shared by the HTTP-facing services."""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import aiohttp


@asynccontextmanager
async def client_session(
    session: Optional[aiohttp.ClientSession], timeout_seconds: float
) -> AsyncIterator[aiohttp.ClientSession]:
    """Yield the injected session, or a fresh one closed on exit.

    An injected session is owned by the caller and left open.
    """
    if session is not None:
        yield session
        return

    timeout = aiohttp.ClientTimeout(total=timeout_seconds)
    async with aiohttp.ClientSession(timeout=timeout) as owned:
        yield owned
