"""
Folio - Portfolio Accounting Core

Public API for recording trades and cash movements and querying
historical positions, moving-average cost, and cash balances.
"""

from importlib.metadata import version

try:
    __version__ = version("folio")
except Exception:
    __version__ = "0.0.0.dev"  # Fallback for development


__all__ = [
    "__version__",
]
