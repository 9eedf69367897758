"""
Domain service interfaces.
"""

from copain.domain.services.i_ledger_transport import ILedgerTransport, LedgerAccount

__all__ = ["ILedgerTransport", "LedgerAccount"]
