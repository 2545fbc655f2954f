"""Centralized configuration for the cashback facilitator.

Loads all configuration from environment variables (and ``.env``) once at
startup. The resulting ``Config`` is passed explicitly to every component.
"""

from typing import Literal, Union

from dotenv import load_dotenv
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from x402_cashback.errors import ConfigurationError

# Load environment variables from .env file
load_dotenv()


class Config(BaseSettings):
    """Facilitator configuration."""

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, extra="ignore", populate_by_name=True
    )

    # Merchant keys
    evm_private_key: str = Field(default="", description="EVM merchant private key (hex)")
    svm_private_key: str = Field(default="", description="Solana merchant private key (base58)")

    # RPC endpoints
    evm_rpc_url: str = Field(default="https://sepolia.base.org", description="EVM RPC endpoint")
    svm_rpc_url: str = Field(default="", description="Solana RPC endpoint override")

    # Cashback
    evm_cashback_token: str = Field(default="", description="ERC-20 token paid out as cashback")
    cashback_percent: Union[int, float] = Field(default=2, description="Advertised cashback percent")

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000)
    environment: str = Field(
        default="development",
        validation_alias=AliasChoices("ENVIRONMENT", "NODE_ENV"),
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")
    log_format: Literal["json", "text"] = Field(default="json")

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def has_evm_key(self) -> bool:
        return bool(self.evm_private_key.strip())

    @property
    def has_svm_key(self) -> bool:
        return bool(self.svm_private_key.strip())


def validate_config(config: Config) -> None:
    """Validate that the facilitator can operate on at least one network family.

    Args:
        config: The configuration to validate.

    Raises:
        ConfigurationError: If neither private key is set.
    """
    if not config.has_evm_key and not config.has_svm_key:
        raise ConfigurationError(
            "Missing required environment variables: set EVM_PRIVATE_KEY and/or SVM_PRIVATE_KEY"
        )
