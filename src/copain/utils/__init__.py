"""Pure helpers: address derivation and record encoding."""

from copain.utils.address import SOCIAL_STATE_SEED, derive_user_state_address
from copain.utils.codec import (
    EMPTY_RECORD_THRESHOLD,
    decode_user_state,
    encode_user_state,
    parse_record,
)

__all__ = [
    "SOCIAL_STATE_SEED",
    "derive_user_state_address",
    "EMPTY_RECORD_THRESHOLD",
    "decode_user_state",
    "encode_user_state",
    "parse_record",
]
