"""Contract invoker backed by web3.py and a local signing key.

Calls are sent as legacy transactions with a fixed ``gasPrice``. Nonce
assignment, signing and broadcast run under one lock so concurrent dispatch
units sharing the account never reuse a nonce; receipt waiting happens
outside the lock.
"""

import asyncio
from typing import Any

import structlog
from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import AsyncWeb3
from web3.contract import AsyncContract

from cascadewatch.core.exceptions import ContractCallError

log = structlog.get_logger(__name__)


class Web3ContractSubmission:
    """Handle for a broadcast contract call."""

    def __init__(
        self,
        w3: AsyncWeb3,
        method: str,
        tx_hash: str,
        receipt_timeout: float,
    ) -> None:
        self._w3 = w3
        self.method = method
        self.tx_hash = tx_hash
        self.receipt_timeout = receipt_timeout

    async def wait(self) -> None:
        """Wait for the receipt.

        Raises:
            ContractCallError: On timeout, RPC failure or a reverted call.
        """
        try:
            receipt = await self._w3.eth.wait_for_transaction_receipt(
                self.tx_hash, timeout=self.receipt_timeout
            )
        except Exception as e:
            raise ContractCallError(self.method, f"receipt not obtained: {e}", self.tx_hash) from e

        if receipt.get("status") == 0:
            raise ContractCallError(self.method, "transaction reverted", self.tx_hash)

        log.debug(
            "contract_call_confirmed",
            method=self.method,
            tx=self.tx_hash[:10] + "...",
            block=receipt.get("blockNumber"),
        )


class Web3ContractInvoker:
    """Signs and submits notification contract calls.

    Example:
        invoker = Web3ContractInvoker(w3, contract, account, chain_id=1)
        submission = await invoker.submit("claimYield", ("signal",), gas_price_wei)
        await submission.wait()
    """

    def __init__(
        self,
        w3: AsyncWeb3,
        contract: AsyncContract,
        account: LocalAccount,
        chain_id: int,
        receipt_timeout: float = 120.0,
    ) -> None:
        """Initialize invoker.

        Args:
            w3: Connected AsyncWeb3 instance
            contract: Notification contract bound to ``w3``
            account: Signing account
            chain_id: Chain id for replay protection
            receipt_timeout: Seconds to wait for each receipt
        """
        self.w3 = w3
        self.contract = contract
        self.account = account
        self.chain_id = chain_id
        self.receipt_timeout = receipt_timeout
        self._send_lock = asyncio.Lock()

    @classmethod
    def create(
        cls,
        http_rpc_url: str,
        contract_address: str,
        abi: list[dict[str, Any]],
        private_key: str,
        chain_id: int,
        receipt_timeout: float = 120.0,
    ) -> "Web3ContractInvoker":
        """Build an invoker with its own AsyncWeb3 HTTP connection."""
        w3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(http_rpc_url))
        contract = w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(contract_address),
            abi=abi,
        )
        account: LocalAccount = Account.from_key(private_key)
        log.info(
            "contract_invoker_initialized",
            contract=contract_address,
            account=account.address,
            chain_id=chain_id,
        )
        return cls(w3, contract, account, chain_id, receipt_timeout)

    async def submit(
        self,
        method: str,
        args: tuple[Any, ...],
        gas_price_wei: int,
    ) -> Web3ContractSubmission:
        """Build, sign and broadcast a contract call.

        Args:
            method: Contract function name
            args: Positional function arguments
            gas_price_wei: Fixed gas price

        Returns:
            Submission handle

        Raises:
            ContractCallError: If building, signing or broadcasting fails
                (gas estimation revert, insufficient funds, RPC error).
        """
        try:
            function = self.contract.get_function_by_name(method)(*args)
        except Exception as e:
            raise ContractCallError(method, f"cannot encode call: {e}") from e

        async with self._send_lock:
            try:
                nonce = await self.w3.eth.get_transaction_count(
                    self.account.address, "pending"
                )
                tx = await function.build_transaction(
                    {
                        "from": self.account.address,
                        "nonce": nonce,
                        "gasPrice": gas_price_wei,
                        "chainId": self.chain_id,
                    }
                )
                signed = self.account.sign_transaction(tx)
                raw_hash = await self.w3.eth.send_raw_transaction(signed.raw_transaction)
            except Exception as e:
                log.warning("contract_call_submit_failed", method=method, error=str(e))
                raise ContractCallError(method, str(e)) from e

        tx_hash = AsyncWeb3.to_hex(raw_hash)
        log.debug("contract_call_submitted", method=method, tx=tx_hash[:10] + "...", nonce=nonce)
        return Web3ContractSubmission(self.w3, method, tx_hash, self.receipt_timeout)
