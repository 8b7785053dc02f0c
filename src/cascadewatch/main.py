"""CascadeWatch - process entry point."""

import asyncio
import sys

import structlog
from pydantic import ValidationError as SettingsValidationError

from cascadewatch.config import Settings, get_settings
from cascadewatch.config.logging import configure_logging
from cascadewatch.core.exceptions import CascadeWatchError, ConfigurationError
from cascadewatch.models.watcher_config import WatcherConfig
from cascadewatch.services.chain import (
    EthereumRPCClient,
    PendingTransactionSubscription,
    Web3ContractInvoker,
    load_abi,
)
from cascadewatch.services.signal import DedupCache, Dispatcher
from cascadewatch.workers import BoundedTaskLauncher, PendingTxIngestWorker

log = structlog.get_logger()


def load_settings() -> Settings:
    """Read settings from the environment.

    Raises:
        ConfigurationError: If a required setting is missing or invalid.
    """
    try:
        return get_settings()
    except SettingsValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


async def build_worker(
    settings: Settings,
) -> tuple[PendingTxIngestWorker, EthereumRPCClient]:
    """Wire collaborators and pipeline components.

    Raises:
        CascadeWatchError: If the chain is unreachable or the ABI is invalid.
    """
    config = WatcherConfig.from_settings(settings)

    rpc_client = EthereumRPCClient(settings.lookup_rpc_url)
    try:
        chain_id = await rpc_client.get_chain_id()
        log.info("startup_chain_connected", chain_id=chain_id, rpc=settings.lookup_rpc_url)

        invoker = Web3ContractInvoker.create(
            http_rpc_url=settings.lookup_rpc_url,
            contract_address=settings.tomb_contract,
            abi=load_abi(settings.tomb_abi_path),
            private_key=settings.private_key.get_secret_value(),
            chain_id=chain_id,
            receipt_timeout=settings.receipt_timeout_seconds,
        )

        dispatcher = Dispatcher(config=config, dedup_cache=DedupCache(), invoker=invoker)
        subscription = PendingTransactionSubscription(settings.rpc_url)
        await subscription.connect()
    except Exception:
        await rpc_client.close()
        raise

    worker = PendingTxIngestWorker(
        subscription=subscription,
        lookup=rpc_client,
        dispatcher=dispatcher,
        launcher=BoundedTaskLauncher(settings.max_in_flight),
    )
    log.info(
        "startup_complete",
        pools=sorted(config.pools),
        selectors=list(config.selectors),
        signal_field_set=config.signal_field_set.value,
        gas_price_wei=config.gas_price_wei,
    )
    return worker, rpc_client


async def run(settings: Settings) -> None:
    """Run the watcher until the stream ends or the task is cancelled."""
    worker, rpc_client = await build_worker(settings)
    try:
        await worker.run()
    finally:
        await worker.stop(drain=False)
        await rpc_client.close()
        log.info("shutdown_complete", **worker.get_status())


def main() -> None:
    """Console script entry point."""
    try:
        settings = load_settings()
    except ConfigurationError as e:
        print(f"cascadewatch: {e}", file=sys.stderr)
        sys.exit(1)

    configure_logging(settings)

    try:
        asyncio.run(run(settings))
    except KeyboardInterrupt:
        log.info("shutdown_requested")
    except CascadeWatchError as e:
        log.error("fatal_error", error=str(e), error_type=type(e).__name__)
        sys.exit(1)


if __name__ == "__main__":
    main()
