"""Pending transaction subscription over a websocket JSON-RPC endpoint.

Uses ``eth_subscribe("newPendingTransactions")`` and yields transaction
hashes as the node announces them. The stream is not restartable: when
the socket closes, iteration ends (or raises SubscriptionClosedError for
an abnormal close) and a new subscription must be created.
"""

import json
from collections.abc import AsyncIterator, Callable
from typing import Any

import structlog
import websockets
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from cascadewatch.constants.chain import PENDING_TX_SUBSCRIPTION
from cascadewatch.core.exceptions import ChainConnectionError, SubscriptionClosedError

log = structlog.get_logger(__name__)


class PendingTransactionSubscription:
    """Websocket stream of pending transaction hashes.

    Example:
        subscription = PendingTransactionSubscription("wss://node.example/ws")
        await subscription.connect()
        async for tx_hash in subscription:
            ...
    """

    def __init__(
        self,
        ws_url: str,
        connect: Callable[..., Any] = websockets.connect,
    ) -> None:
        """Initialize subscription.

        Args:
            ws_url: Websocket RPC endpoint
            connect: Websocket connect function (injectable for tests)
        """
        self.ws_url = ws_url
        self._connect = connect
        self._ws: Any = None
        self._subscription_id: str | None = None
        self._consumed = False

    @property
    def subscription_id(self) -> str | None:
        return self._subscription_id

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=4),
        retry=retry_if_exception_type(OSError),
        reraise=True,
    )
    async def _open(self) -> Any:
        return await self._connect(self.ws_url, ping_interval=20, ping_timeout=20)

    async def connect(self) -> None:
        """Open the socket and register the subscription.

        Raises:
            ChainConnectionError: If the socket cannot be opened or the node
                rejects the subscription.
        """
        if self._ws is not None:
            return

        try:
            self._ws = await self._open()
            await self._ws.send(
                json.dumps(
                    {
                        "jsonrpc": "2.0",
                        "id": 1,
                        "method": "eth_subscribe",
                        "params": [PENDING_TX_SUBSCRIPTION],
                    }
                )
            )
            reply = json.loads(await self._ws.recv())
        except (OSError, websockets.WebSocketException) as e:
            log.error("subscription_connect_failed", url=self.ws_url, error=str(e))
            raise ChainConnectionError(f"eth_subscribe failed: {e}", method="eth_subscribe") from e

        if "error" in reply or not reply.get("result"):
            await self.close()
            raise ChainConnectionError(
                f"eth_subscribe rejected: {reply.get('error')}", method="eth_subscribe"
            )

        self._subscription_id = reply["result"]
        log.info("subscription_started", subscription_id=self._subscription_id)

    async def close(self) -> None:
        """Close the websocket."""
        if self._ws is not None:
            await self._ws.close()
            self._ws = None
            log.info("subscription_closed", subscription_id=self._subscription_id)

    def __aiter__(self) -> AsyncIterator[str]:
        if self._consumed:
            raise SubscriptionClosedError(
                "Pending transaction subscription cannot be restarted",
                method="eth_subscribe",
            )
        self._consumed = True
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[str]:
        await self.connect()

        try:
            async for message in self._ws:
                tx_hash = self._parse_notification(message)
                if tx_hash is not None:
                    yield tx_hash
            log.error("subscription_ended", subscription_id=self._subscription_id)
            raise SubscriptionClosedError("Subscription stream ended", method="eth_subscribe")
        except websockets.ConnectionClosed as e:
            log.error("subscription_dropped", subscription_id=self._subscription_id, error=str(e))
            raise SubscriptionClosedError(
                f"Subscription connection dropped: {e}", method="eth_subscribe"
            ) from e
        finally:
            await self.close()

    def _parse_notification(self, message: str | bytes) -> str | None:
        """Extract the transaction hash from an ``eth_subscription`` message."""
        try:
            data = json.loads(message)
        except ValueError:
            log.warning("subscription_message_invalid_json")
            return None

        if not isinstance(data, dict):
            return None
        if data.get("method") != "eth_subscription":
            return None

        params = data.get("params")
        if not isinstance(params, dict):
            return None
        if params.get("subscription") != self._subscription_id:
            return None

        result = params.get("result")
        # Some nodes push full transaction objects instead of hashes
        if isinstance(result, dict):
            result = result.get("hash")
        if not isinstance(result, str):
            return None
        return result
