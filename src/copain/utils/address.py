"""
Storage address derivation for social state accounts.

The on-chain program and the system program's CreateAccountWithSeed both
locate a user's state account at sha256(owner || seed || program_id).
Changing the seed silently desynchronizes client and program.
"""

from typing import Union

from solders.pubkey import Pubkey  # type: ignore

from copain.domain.value_objects.identity import Identity

SOCIAL_STATE_SEED = "INITIALIZE_STATE"

MAX_SEED_LEN = 32


def _as_pubkey(value: Union[Identity, Pubkey, str]) -> Pubkey:
    if isinstance(value, Pubkey):
        return value
    if isinstance(value, Identity):
        return value.to_pubkey()
    return Identity(value).to_pubkey()


def derive_user_state_address(
    owner: Union[Identity, Pubkey, str],
    program_id: Union[Identity, Pubkey, str],
    seed: str = SOCIAL_STATE_SEED,
) -> Pubkey:
    """
    Derive the storage address holding an identity's user state.

    Args:
        owner: Identity owning the state
        program_id: Social program identity
        seed: Derivation seed shared with the program

    Returns:
        Derived storage address

    Raises:
        ValueError: If the seed is longer than 32 bytes

    Examples:
        >>> addr = derive_user_state_address(
        ...     "Vote111111111111111111111111111111111111111",
        ...     "BPFLoaderUpgradeab1e11111111111111111111111",
        ... )
    """
    if len(seed.encode("utf-8")) > MAX_SEED_LEN:
        raise ValueError(f"Seed exceeds {MAX_SEED_LEN} bytes: {seed!r}")

    return Pubkey.create_with_seed(
        _as_pubkey(owner),
        seed,
        _as_pubkey(program_id),
    )
