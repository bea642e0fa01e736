import os

from pathlib import Path
from typing import Any, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


BASE_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    def model_post_init(self, __context: Any) -> None:
        """Pick up the millisecond-based waiting settings used by older deployments."""

        super().model_post_init(__context)

        legacy_tx_ms = os.getenv("TX_WAITING_TIME")
        if legacy_tx_ms and "TX_WAITING_TIME_SECONDS" not in os.environ:
            object.__setattr__(self, "tx_waiting_time_seconds", float(legacy_tx_ms) / 1000.0)

        legacy_swap_ms = os.getenv("SWAP_WAITING_TIME")
        if legacy_swap_ms and "SWAP_WAITING_TIME_SECONDS" not in os.environ:
            object.__setattr__(self, "swap_waiting_time_seconds", float(legacy_swap_ms) / 1000.0)

    # General
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Log output format (json or console)")
    ton_network: str = Field(default="mainnet", description="TON network (mainnet or testnet)")

    # Ledger endpoints
    toncenter_base_url: str = Field(
        default="https://toncenter.com/api/v2/jsonRPC",
        description="Toncenter v2 JSON-RPC endpoint",
        validation_alias=AliasChoices("toncenter_base_url", "TON_RPC_URL"),
    )
    toncenter_v3_base_url: str = Field(
        default="https://toncenter.com/api/v3",
        description="Toncenter v3 indexer base URL (transaction phases)",
    )
    toncenter_api_key: str = Field(
        default="",
        description="Toncenter API key",
        validation_alias=AliasChoices("toncenter_api_key", "TON_RPC_API_KEY"),
    )
    tonapi_base_url: str = Field(default="https://tonapi.io", description="TonAPI base URL (get-methods)")
    tonapi_api_key: str = Field(default="", description="TonAPI bearer token")
    ston_api_base_url: str = Field(default="https://api.ston.fi", description="STON.fi API base URL")
    request_timeout_seconds: int = Field(default=30, description="HTTP request timeout")

    # Confirmation polling
    tx_waiting_time_seconds: float = Field(
        default=1.0,
        gt=0,
        description="Sleep between confirmation polls",
    )
    tx_waiting_steps: int = Field(
        default=60,
        ge=1,
        description="Confirmation poll budget (total wait = time * steps)",
        validation_alias=AliasChoices("tx_waiting_steps", "TX_WAITING_STEPS"),
    )

    # Settlement polling
    swap_waiting_time_seconds: float = Field(
        default=1.0,
        gt=0,
        description="Sleep between settlement status polls",
    )
    swap_waiting_steps: int = Field(
        default=180,
        ge=1,
        description="Settlement poll budget (total wait = time * steps)",
        validation_alias=AliasChoices("swap_waiting_steps", "SWAP_WAITING_STEPS"),
    )

    # Envelopes
    envelope_ttl_seconds: int = Field(default=300, ge=1, description="Envelope validity window")
    max_messages_per_envelope: int = Field(
        default=4,
        ge=1,
        le=255,
        description="Maximum messages a wallet accepts in one envelope",
    )

    # Staking
    staking_pools_file: Optional[str] = Field(
        default=None,
        description="YAML file overriding the built-in staking pool address table",
    )

    @property
    def is_mainnet(self) -> bool:
        return self.ton_network.lower() == "mainnet"

    @property
    def has_toncenter_key(self) -> bool:
        return bool(self.toncenter_api_key)


# Global settings instance
settings = Settings()
