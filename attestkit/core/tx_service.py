"""
Client for the external transaction service.

Requests are authenticated with the ``txService`` block of the resolved
configuration. When that block is absent every call is a no-op returning None.
"""

import logging
from typing import Any, Dict, Optional

import aiohttp

from ..config import ConfigProvider, get_provider
from ..utils.json_helpers import dumps

logger = logging.getLogger(__name__)

WEBHOOK_ROUTING_KEY = "bloom-web"
DEFAULT_TIMEOUT = 30.0


class TxServiceError(Exception):
    """Raised when the transaction service rejects a request."""

    def __init__(self, url: str, status: int, body: Any = None):
        super().__init__(f"tx-service request to {url} failed with HTTP {status}")
        self.url = url
        self.status = status
        self.body = body


class TxServiceClient:
    """Thin async gateway to the transaction service."""

    def __init__(
        self,
        provider: Optional[ConfigProvider] = None,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """
        Initialize the client.

        Args:
            provider: Configuration provider, defaults to the process provider
            session: Shared aiohttp session; a short-lived one is opened per call otherwise
            timeout: Total request timeout in seconds
        """
        self.provider = provider or get_provider()
        self._session = session
        self.timeout = aiohttp.ClientTimeout(total=timeout)

    async def request(self, action: str, params: Optional[Dict[str, Any]] = None) -> Optional[Any]:
        """
        POST ``params`` to ``action`` on the transaction service.

        Args:
            action: Path appended to the service address, e.g. ``/api/txs``
            params: JSON body; the webhook routing key is added to it

        Returns:
            Decoded JSON response, or None when the service is not configured

        Raises:
            TxServiceError: If the service answers with an error status
        """
        config = await self.provider.get()
        if config.tx_service is None:
            logger.debug(f"tx-service not configured, skipping {action}")
            return None

        url = config.tx_service.address + action
        body = dict(params or {}, webhook_key=WEBHOOK_ROUTING_KEY)
        headers = {
            "API_TOKEN": config.tx_service.key,
            "Accept": "application/json",
            "Content-Type": "application/json",
        }

        logger.info(f"Initiating request to tx-service {url}")
        if self._session is not None:
            result = await self._post(self._session, url, headers, body)
        else:
            async with aiohttp.ClientSession() as session:
                result = await self._post(session, url, headers, body)
        logger.info(f"Completed tx-service request {url}")
        return result

    async def _post(self, session: aiohttp.ClientSession, url: str, headers: Dict[str, str], body: Dict[str, Any]) -> Any:
        async with session.post(url, data=dumps(body), headers=headers, timeout=self.timeout) as response:
            if response.status >= 400:
                try:
                    payload = await response.json(content_type=None)
                except ValueError:
                    payload = await response.text()
                raise TxServiceError(url, response.status, payload)
            return await response.json(content_type=None)

    async def get_tx(self, tx_id: int) -> Optional[Any]:
        return await self.request(f"/api/txs/{tx_id}", {})

    async def get_txs(self, where: Optional[Dict[str, Any]] = None) -> Optional[Any]:
        params = {"where": where} if where is not None else {}
        return await self.request("/api/txs", params)

    async def send_tx(
        self,
        tx: Dict[str, Any],
        webhook: Optional[Dict[str, Any]] = None,
        expire_in: Optional[int] = None,
    ) -> Optional[Any]:
        """
        Submit a transaction.

        Args:
            tx: ``network``, ``contract_name``, ``method``, ``args`` and optionally
                ``max_estimate_retries``
            webhook: Optional ``mined``, ``address`` and ``key`` callback settings
            expire_in: Optional expiry in seconds
        """
        params: Dict[str, Any] = {"tx": tx}
        if webhook is not None:
            params["webhook"] = webhook
        if expire_in is not None:
            params["expireIn"] = expire_in
        return await self.request("/api/txs", params)

    async def destroy_tx(self, tx_id: int) -> Optional[Any]:
        return await self.request(f"/api/txs/{tx_id}", {})
