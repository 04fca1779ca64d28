"""
Infrastructure layer for the tranche manager

Provides:
- CorrelationContext: correlation-id scoped logging
- ShareLedger: fungible ownership share bookkeeping
"""

from .context import (
    CorrelationContext,
    generate_correlation_id,
    get_correlation_id,
    set_correlation_id,
    log_with_correlation,
)
from .ledger import ShareLedger

__all__ = [
    "CorrelationContext",
    "generate_correlation_id",
    "get_correlation_id",
    "set_correlation_id",
    "log_with_correlation",
    "ShareLedger",
]
