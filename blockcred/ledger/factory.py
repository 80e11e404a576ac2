"""Ledger variant selection."""

from __future__ import annotations

import logging

from blockcred.config import LedgerConfig, LedgerVariant
from blockcred.ledger.base import LedgerClient
from blockcred.ledger.generic import GenericRpcLedgerClient
from blockcred.ledger.mock import MockLedgerClient
from blockcred.ledger.poa import PoALedgerClient

logger = logging.getLogger("blockcred.ledger.factory")


def create_ledger_client(config: LedgerConfig) -> LedgerClient:
    """Build the configured ledger client. Called once at startup."""
    if config.variant == LedgerVariant.POA:
        client: LedgerClient = PoALedgerClient.from_config(config)
    elif config.variant == LedgerVariant.GENERIC:
        client = GenericRpcLedgerClient.from_config(config)
    elif config.variant == LedgerVariant.MOCK:
        client = MockLedgerClient(gas_used=config.gas_limit)
    else:
        raise ValueError(f"Unknown ledger variant: {config.variant}")

    logger.info(f"Ledger client: {client!r}")
    return client
