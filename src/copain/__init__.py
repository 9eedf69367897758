"""
Copain - friend lists and presence stored on Solana.

Client-side protocol layer for a social program: derives per-identity state
accounts, encodes the friend record, and applies friend operations with
mutate-then-verify semantics.
"""

__version__ = "0.1.0"
