"""
Infrastructure layer: ledger transport, wallets and monitoring.
"""
