import asyncio
import logging

import httpx

from app.services.connectivity import HttpConnectivityProbe

logger = logging.getLogger(__name__)


async def run_connectivity_loop(probe: HttpConnectivityProbe, interval: float):
    """
    Poll the connectivity probe until cancelled.

    The loop only feeds the connectivity source; syncs are triggered by the
    source's offline -> online transition, not by the timer.
    """
    logger.info(f"Starting connectivity monitor: {probe.probe_url} every {interval}s")

    async with httpx.AsyncClient(timeout=probe.timeout) as client:
        while True:
            try:
                await probe.probe(client)
            except Exception as e:
                logger.error(f"Error in connectivity loop: {e}")

            await asyncio.sleep(interval)
