"""
HTTP price oracle (httpx)
"""

from .oracle import PriceApiOracle

__all__ = ["PriceApiOracle"]
