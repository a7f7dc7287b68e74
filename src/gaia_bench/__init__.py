"""GAIA benchmark harness: evaluation, checkpointing, ledger and analytics."""
