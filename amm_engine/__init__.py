"""
AMM Engine - Quote, range and depth math for AMM trading interfaces.

Architecture:
- engine/: Pure computations (price range editing, swap quotes, depth aggregation)
- datafeed/: Synthetic market data standing in for a real provider
- types.py: Immutable value types shared by every module
"""

__version__ = "0.1.0"
