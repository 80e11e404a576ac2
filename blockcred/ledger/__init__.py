"""
BlockCred Ledger
=================

Anchors certificate integrity proofs on a ledger.

Components:
    - base.py:    Abstract LedgerClient interface
    - rpc.py:     JSON-RPC 2.0 transport
    - abi.py:     Registry contract calldata encoding / result decoding
    - poa.py:     Live contract client for PoA networks
    - generic.py: Simulated writes against any JSON-RPC node
    - mock.py:    In-process registry
    - factory.py: Variant selection from config
"""

from blockcred.ledger.base import LedgerClient
from blockcred.ledger.factory import create_ledger_client
from blockcred.ledger.generic import GenericRpcLedgerClient
from blockcred.ledger.mock import MockLedgerClient
from blockcred.ledger.poa import PoALedgerClient

__all__ = [
    "LedgerClient",
    "PoALedgerClient",
    "GenericRpcLedgerClient",
    "MockLedgerClient",
    "create_ledger_client",
]
