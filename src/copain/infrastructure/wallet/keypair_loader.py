"""
Keypair and Solana CLI config helpers.
"""

import json
from pathlib import Path
from typing import Optional

import yaml
from solders.keypair import Keypair  # type: ignore

from copain.domain.exceptions import KeypairLoadError
from copain.domain.value_objects.identity import Identity

CLI_CONFIG_PATH = Path.home() / ".config" / "solana" / "cli" / "config.yml"

TARGET_CONFIG_KEY = "social_dapp_target"


def load_keypair(keypair_path: str) -> Keypair:
    """
    Load Solana keypair from JSON file.

    Args:
        keypair_path: Path to keypair JSON file (array of 64 byte values)

    Returns:
        Solana Keypair object

    Raises:
        KeypairLoadError: If the file is missing or malformed

    Examples:
        >>> keypair = load_keypair("~/.config/solana/id.json")
        >>> print(keypair.pubkey())
    """
    path = Path(keypair_path).expanduser()

    if not path.exists():
        raise KeypairLoadError(keypair_path, "file not found")

    try:
        with open(path, "r") as f:
            secret_key = json.load(f)
        return Keypair.from_bytes(bytes(secret_key))
    except (ValueError, TypeError) as e:
        raise KeypairLoadError(keypair_path, str(e))


def read_cli_config(config_path: Optional[Path] = None) -> Optional[dict]:
    """
    Load and parse the Solana CLI config file.

    Args:
        config_path: Override path (defaults to ~/.config/solana/cli/config.yml)

    Returns:
        Parsed config, or None if missing or unreadable
    """
    path = Path(config_path) if config_path else CLI_CONFIG_PATH
    if not path.exists():
        return None
    try:
        with open(path, "r", encoding="utf-8") as f:
            loaded = yaml.safe_load(f)
    except (OSError, yaml.YAMLError):
        return None
    return loaded if isinstance(loaded, dict) else None


def resolve_payer_path(
    explicit: Optional[str], cli_config: Optional[dict]
) -> Optional[str]:
    """
    Determine which keypair pays for transactions.

    Args:
        explicit: Keypair path from settings or command line
        cli_config: Parsed Solana CLI config

    Returns:
        Keypair path, or None if none is configured
    """
    if explicit:
        return explicit
    if cli_config and cli_config.get("keypair_path"):
        return str(cli_config["keypair_path"])
    return None


def resolve_target(
    explicit: Optional[str], cli_config: Optional[dict]
) -> Optional[Identity]:
    """
    Determine the target identity of a friend operation.

    Args:
        explicit: Target from settings or command line
        cli_config: Parsed Solana CLI config (``social_dapp_target`` key)

    Returns:
        Target identity, or None if none is configured
    """
    if explicit:
        return Identity(explicit)
    if cli_config and cli_config.get(TARGET_CONFIG_KEY):
        return Identity(str(cli_config[TARGET_CONFIG_KEY]))
    return None
