"""
Connectivity signal for the check-in device.

Subscribers are notified only on transitions (online -> offline or
offline -> online), never on repeated reports of the same state.
"""
import inspect
import logging
from typing import Callable, List, Optional

import httpx

logger = logging.getLogger(__name__)

# listener(is_online) -> None or awaitable
ConnectivityListener = Callable[[bool], object]


class ConnectivitySource:
    """Process-wide online/offline flag with transition notifications"""

    def __init__(self, online: bool = True):
        self._online = online
        self._listeners: List[ConnectivityListener] = []

    @property
    def is_online(self) -> bool:
        return self._online

    def subscribe(self, listener: ConnectivityListener) -> Callable[[], None]:
        """Register a listener. Returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def set_online(self, online: bool) -> bool:
        """
        Report the current connectivity state.

        Listeners run in subscription order and async listeners are awaited,
        so an offline -> online report returns after the triggered syncs finish.
        Returns True if the state changed.
        """
        if online == self._online:
            return False

        self._online = online
        logger.info(f"Connectivity changed: {'online' if online else 'offline'}")

        for listener in list(self._listeners):
            try:
                result = listener(online)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(f"Connectivity listener failed: {e}", exc_info=True)

        return True


class HttpConnectivityProbe(ConnectivitySource):
    """Derives connectivity from an HTTP health endpoint"""

    def __init__(self, probe_url: str, timeout: float = 5.0, online: bool = True):
        super().__init__(online=online)
        self.probe_url = probe_url
        self.timeout = timeout

    async def probe(self, client: Optional[httpx.AsyncClient] = None) -> bool:
        """Hit the probe URL once and publish the result"""
        try:
            if client is None:
                async with httpx.AsyncClient(timeout=self.timeout) as own_client:
                    response = await own_client.get(self.probe_url)
            else:
                response = await client.get(self.probe_url, timeout=self.timeout)
            reachable = response.status_code < 500
        except httpx.HTTPError as e:
            logger.debug(f"Connectivity probe failed: {e}")
            reachable = False

        await self.set_online(reachable)
        return reachable
