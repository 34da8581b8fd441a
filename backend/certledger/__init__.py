"""Certificate ledger record store and query service"""
