"""
PisteBot

Ledger-to-settlement bridge: consumes structured-product lifecycle events from a
ledger, notifies operators and writes MT202 settlement messages.
"""

__version__ = "1.0.0"
