"""txlander - reliable transaction submission for Solana."""

__version__ = "0.1.0"
