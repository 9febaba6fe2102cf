from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from raydium_swap_engine.errors import ConfigurationError

WSOL_MINT = "So11111111111111111111111111111111111111112"
USDC_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"


class SwapConfig(BaseModel):
    """Run parameters for one swap. Fixed for the run, never derived from responses."""

    model_config = ConfigDict(frozen=True)

    input_asset: str = Field(min_length=1)
    output_asset: str = Field(min_length=1)
    amount: int = Field(gt=0)  # smallest unit of the input mint
    slippage_bps: int = Field(ge=0, le=10_000)
    tx_version: Literal["V0", "LEGACY"] = "V0"
    fee_tier_name: Literal["vh", "h", "m"] = "h"
    wrap: bool = True
    unwrap: bool = False
    key_source: str | None = None


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=(".env",), env_prefix="RSE_", extra="allow")

    # Solana
    rpc_url: str = "https://api.mainnet-beta.solana.com"
    rpc_commitment: Literal["processed", "confirmed", "finalized"] = "confirmed"
    explorer_url: str = "https://solscan.io/tx/"

    # Raydium trade API
    priority_fee_url: str = "https://api-v3.raydium.io/main/auto-fee"
    swap_base_url: str = "https://transaction-v1.raydium.io"
    http_timeout_sec: float = 15.0

    # Swap
    input_asset: str = WSOL_MINT
    output_asset: str = USDC_MINT
    amount: int = 0  # must be set for a real run
    slippage_bps: int = 50  # 0.5%
    tx_version: str = "V0"
    fee_tier_name: str = "h"
    wrap: bool = True
    unwrap: bool = False

    # Wallet
    key_source: str | None = None  # path to a Solana CLI keypair file
    private_key: str | None = None  # base58 secret key, used when key_source is unset

    # Execution
    dry_run: bool = False

    # Logging
    log_level: str = "INFO"

    @field_validator("key_source", "private_key", mode="before")
    @classmethod
    def _empty_str_to_none(cls, v):
        if v == "":
            return None
        return v

    def swap_config(self) -> SwapConfig:
        try:
            return SwapConfig(
                input_asset=self.input_asset,
                output_asset=self.output_asset,
                amount=self.amount,
                slippage_bps=self.slippage_bps,
                tx_version=self.tx_version.upper(),
                fee_tier_name=self.fee_tier_name,
                wrap=self.wrap,
                unwrap=self.unwrap,
                key_source=self.key_source,
            )
        except ValidationError as e:
            fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
            raise ConfigurationError(f"invalid swap settings: {fields}", stage="config") from e


def load_settings(**overrides) -> AppSettings:
    try:
        return AppSettings(**overrides)
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise ConfigurationError(f"invalid settings: {fields}", stage="config") from e
