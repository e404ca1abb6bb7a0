"""oraclevault: oracle-gated governance and accounting for a market-making vault.

Price truth changes slowly and in public. Shares change exactly.
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "1.0.0"
