"""Shared httpx helpers for provider clients."""
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import httpx


@asynccontextmanager
async def client_scope(client: Optional[httpx.AsyncClient]) -> AsyncIterator[httpx.AsyncClient]:
    """Use the injected client, or open a short-lived one for this call."""
    if client is not None:
        yield client
        return
    async with httpx.AsyncClient() as owned:
        yield owned
