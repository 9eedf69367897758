"""
Copain configuration with hybrid YAML + ENV support.

Priority: Environment variables > YAML config > Pydantic defaults
"""

import logging
import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_RPC_URL = "http://localhost:8899"


class TimeoutConfig(BaseSettings):
    """Timeout configuration for ledger operations."""

    rpc_call: float = Field(default=10.0, ge=1.0, le=60.0)
    transaction_confirmation: float = Field(default=60.0, ge=5.0, le=300.0)
    poll_interval: float = Field(default=0.5, ge=0.05, le=10.0)


class CopainConfig(BaseSettings):
    """
    Copain configuration schema.

    Covers the Solana cluster connection, the social program identity,
    the caller's keypair and the fee budget used when topping up the payer.
    """

    model_config = SettingsConfigDict(
        env_prefix="COPAIN_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="allow",
    )

    # Blockchain configuration
    solana_rpc_url: Optional[str] = Field(default=None)
    solana_network: str = Field(default="devnet")
    commitment: str = Field(default="confirmed")
    program_id: Optional[str] = Field(default=None)
    program_keypair_path: str = Field(
        default="dist/program/solana_social_dapp-keypair.json"
    )
    program_so_path: str = Field(default="dist/program/solana_social_dapp.so")

    # Caller identity
    keypair_path: Optional[str] = Field(default=None)
    target: Optional[str] = Field(default=None)

    # Social state account layout (shared with the on-chain program)
    state_seed: str = Field(default="INITIALIZE_STATE", min_length=1, max_length=32)
    user_state_size: int = Field(default=1_000_000, ge=16, le=10 * 1024 * 1024)

    # Fees
    lamports_per_signature: int = Field(default=5000, ge=0)
    fee_signature_budget: int = Field(default=100, ge=0, le=10_000)

    # Logging
    log_level: str = Field(default="info")
    log_dir: Optional[str] = Field(default=None)
    verbose: int = Field(default=1, ge=0, le=3)

    timeouts: TimeoutConfig = Field(default_factory=TimeoutConfig)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed = ["debug", "info", "warning", "error", "critical"]
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"Invalid log_level. Must be one of: {allowed}")
        return v_lower

    @field_validator("solana_network")
    @classmethod
    def validate_network(cls, v: str) -> str:
        """Validate Solana network."""
        allowed = ["localnet", "devnet", "testnet", "mainnet-beta"]
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"Invalid network. Must be one of: {allowed}")
        return v_lower

    @field_validator("commitment")
    @classmethod
    def validate_commitment(cls, v: str) -> str:
        """Validate commitment level."""
        allowed = ["processed", "confirmed", "finalized"]
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"Invalid commitment. Must be one of: {allowed}")
        return v_lower

    @field_validator("keypair_path", "program_keypair_path", "program_so_path")
    @classmethod
    def expand_paths(cls, v: Optional[str]) -> Optional[str]:
        """Expand home directory in file paths."""
        if v:
            return os.path.expanduser(v)
        return v

    def resolve_rpc_url(self, cli_config: Optional[dict] = None) -> str:
        """
        Determine which RPC endpoint to use.

        Explicit settings win, then the Solana CLI config, then localhost.

        Args:
            cli_config: Parsed Solana CLI config (may be None)

        Returns:
            RPC URL
        """
        if self.solana_rpc_url:
            return self.solana_rpc_url
        if cli_config and cli_config.get("json_rpc_url"):
            return cli_config["json_rpc_url"]
        return DEFAULT_RPC_URL

    def get_log_level(self) -> int:
        """Numeric logging level for the configured log_level."""
        return getattr(logging, self.log_level.upper())


def load_config(config_file: Optional[str] = None) -> CopainConfig:
    """
    Load configuration from YAML files.

    Priority: Environment variables > environment-specific YAML > default YAML

    Args:
        config_file: Optional YAML filename or path override

    Returns:
        CopainConfig instance
    """
    env = os.getenv("ENV", "production")

    config_map = {
        "production": "production.yaml",
        "development": "development.yaml",
        "test": "test.yaml",
    }

    config_dir = Path(os.getenv("COPAIN_CONFIG_DIR", _default_config_dir()))

    merged_config = {}
    default_config_path = config_dir / "default.yaml"
    if default_config_path.exists():
        with open(default_config_path, "r") as f:
            loaded = yaml.safe_load(f)
            if loaded:
                merged_config = loaded

    if config_file is None:
        config_file = os.getenv("COPAIN_CONFIG")
        if not config_file:
            config_file = config_map.get(env, "production.yaml")

    env_config_path = Path(config_file).expanduser()
    if not env_config_path.is_absolute():
        env_config_path = config_dir / config_file

    if env_config_path.exists():
        with open(env_config_path, "r") as f:
            loaded = yaml.safe_load(f)
            if loaded:
                merged_config.update(loaded)

    # Environment variables must win over YAML, so only pass YAML keys
    # that are not overridden by a COPAIN_* variable.
    overridden = {
        key[len("COPAIN_"):].lower()
        for key in os.environ
        if key.upper().startswith("COPAIN_")
    }
    yaml_values = {}
    for key, value in merged_config.items():
        if key in overridden:
            continue
        if isinstance(value, dict):
            # Nested sections (timeouts) are overridden per field.
            value = {
                sub: v
                for sub, v in value.items()
                if f"{key}__{sub}".lower() not in overridden
            }
        yaml_values[key] = value

    return CopainConfig(**yaml_values)


def _default_config_dir() -> str:
    """Project-level config directory (repo root / config)."""
    current_file = Path(__file__).resolve()
    project_root = current_file.parent.parent.parent.parent
    return str(project_root / "config")


# Global settings instance
_settings: Optional[CopainConfig] = None


def get_settings() -> CopainConfig:
    """
    Get singleton settings instance.

    Returns:
        CopainConfig instance
    """
    global _settings
    if _settings is None:
        _settings = load_config()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings instance (used by the CLI and tests)."""
    global _settings
    _settings = None
