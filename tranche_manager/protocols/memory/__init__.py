"""
In-memory venue and oracles for simulation and tests
"""

from .pool import InMemoryPool, StaticOracle, PoolTickOracle

__all__ = ["InMemoryPool", "StaticOracle", "PoolTickOracle"]
