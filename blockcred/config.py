"""
BlockCred Configuration System
===============================

Central configuration using Pydantic Settings. Supports:
- Environment variables (BLOCKCRED_ prefix, ``__`` for nested fields)
- .env file loading
- YAML config file overrides
- Three ledger variants: "poa" (Besu-style PoA node), "generic"
  (plain JSON-RPC node, simulated writes) and "mock" (in-process)

The config produces a deterministic hash so that log output from
different deployments can be told apart. Secrets never enter the hash.

Usage:
    from blockcred.config import get_config
    cfg = get_config()                       # loads from env / .env
    cfg = get_config("configs/besu.yaml")    # loads with YAML overrides
"""

from __future__ import annotations

import hashlib
import json
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# ── Variants ───────────────────────────────────────────────────────
class LedgerVariant(str, Enum):
    """
    Which LedgerClient implementation the pipeline is wired with.

    - POA:     Proof-of-authority node (Hyperledger Besu / Clique) with a
               deployed certificate registry contract.
    - GENERIC: Any JSON-RPC node; writes are simulated, chain height is real.
    - MOCK:    Fully in-process ledger for development and tests.
    """
    POA = "poa"
    GENERIC = "generic"
    MOCK = "mock"


class ContentBackend(str, Enum):
    """Content-addressed store used for certificate artifacts."""
    PINATA = "pinata"
    LOCAL = "local"


# ── Sub-configs ────────────────────────────────────────────────────
class LedgerConfig(BaseModel):
    """Configuration for the ledger client."""
    variant: LedgerVariant = Field(default=LedgerVariant.MOCK, description="Ledger client variant")
    rpc_url: str = Field(default="http://localhost:8545", description="JSON-RPC endpoint of the node")
    contract_address: str = Field(
        default="",
        description="Certificate registry contract; empty means not deployed yet"
    )
    default_sender: str = Field(
        default="0x53b8be11aada878bbf830e426d5d3071c34facef",
        description="Unlocked node account used as the transaction sender"
    )
    block_period_seconds: float = Field(
        default=5.0, gt=0.0,
        description="Clique block period; receipt polling interval"
    )
    receipt_max_attempts: int = Field(
        default=12, ge=1,
        description="Receipt polls before the transaction is reported unconfirmed"
    )
    gas_limit: int = Field(default=200_000, description="Gas limit for contract writes")
    request_timeout: float = Field(default=30.0, description="HTTP timeout in seconds")


class ContentStoreConfig(BaseModel):
    """Configuration for the content-addressed store (Pinata / IPFS)."""
    backend: ContentBackend = Field(default=ContentBackend.LOCAL, description="Content store backend")
    api_key: Optional[str] = Field(default=None, description="Pinata API key")
    api_secret: Optional[str] = Field(default=None, description="Pinata API secret")
    api_url: str = Field(default="https://api.pinata.cloud", description="Pinata API base URL")
    gateway_url: str = Field(
        default="https://gateway.pinata.cloud/ipfs/",
        description="Public gateway prefix used to build content URLs"
    )
    cid_version: int = Field(default=1, description="CID version requested from Pinata")
    request_timeout: float = Field(default=30.0, description="HTTP timeout in seconds")


class IssuanceConfig(BaseModel):
    """Behavioural switches for the issuance and verification workflow."""
    register_wallets: bool = Field(
        default=True,
        description="Attempt best-effort ledger registration of derived wallets"
    )
    stamp_verified_at: bool = Field(
        default=True,
        description="Record VerifiedAt (and issued → verified) after a successful verification"
    )


# ── Main Config ────────────────────────────────────────────────────
class BlockCredConfig(BaseSettings):
    """
    Root configuration for the BlockCred credential pipeline.

    Loads from environment variables (BLOCKCRED_ prefix) and .env file.
    Can be extended with YAML overrides via `get_config(yaml_path)`.

    Example:
        export BLOCKCRED_LEDGER__VARIANT=poa
        export BLOCKCRED_LEDGER__CONTRACT_ADDRESS=0xabc...
        export BLOCKCRED_CONTENT__API_KEY=...
    """
    model_config = SettingsConfigDict(
        env_prefix="BLOCKCRED_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Top-level settings ─────────────────────────────────────────
    institution: str = Field(
        default="SSN College of Engineering",
        description="Default institution stamped on issued metadata"
    )
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="text", description="Log format: 'json' or 'text'")

    # ── Sub-configs ────────────────────────────────────────────────
    ledger: LedgerConfig = Field(default_factory=LedgerConfig)
    content: ContentStoreConfig = Field(default_factory=ContentStoreConfig)
    issuance: IssuanceConfig = Field(default_factory=IssuanceConfig)

    @property
    def has_contract(self) -> bool:
        """Whether a registry contract address is configured."""
        return bool(self.ledger.contract_address)

    def config_hash(self) -> str:
        """
        Produce a deterministic SHA-256 hash of the configuration.

        Credentials are excluded so the hash can be logged safely.
        """
        config_dict = self.model_dump(
            mode="json",
            exclude={"content": {"api_key", "api_secret"}},
        )
        canonical = json.dumps(config_dict, sort_keys=True, default=str)
        return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:16]


# ── Config Loading ─────────────────────────────────────────────────
def get_config(yaml_path: Optional[str] = None) -> BlockCredConfig:
    """
    Load BlockCred configuration.

    Priority (highest to lowest):
        1. Explicit values from the YAML file (if provided)
        2. Environment variables (BLOCKCRED_ prefix)
        3. .env file
        4. Default values

    Args:
        yaml_path: Optional path to a YAML config file for overrides.

    Returns:
        Fully resolved BlockCredConfig instance.
    """
    if yaml_path:
        import yaml
        with open(yaml_path) as f:
            overrides = yaml.safe_load(f) or {}
        return BlockCredConfig(**overrides)
    return BlockCredConfig()
