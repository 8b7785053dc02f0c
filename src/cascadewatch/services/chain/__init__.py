"""Chain collaborators: lookup, subscription and contract invocation."""

from cascadewatch.services.chain.abi import TOMB_ABI, load_abi
from cascadewatch.services.chain.contract import Web3ContractInvoker, Web3ContractSubmission
from cascadewatch.services.chain.interfaces import (
    ContractInvoker,
    ContractSubmission,
    PendingTransactionSource,
    TransactionLookup,
)
from cascadewatch.services.chain.rpc_client import EthereumRPCClient
from cascadewatch.services.chain.subscription import PendingTransactionSubscription

__all__ = [
    "TOMB_ABI",
    "ContractInvoker",
    "ContractSubmission",
    "EthereumRPCClient",
    "PendingTransactionSource",
    "PendingTransactionSubscription",
    "TransactionLookup",
    "Web3ContractInvoker",
    "Web3ContractSubmission",
    "load_abi",
]
