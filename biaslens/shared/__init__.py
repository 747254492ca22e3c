"""
Shared utilities used across all domain layers.

- helpers.py: half-up rounding and base-36 ids used by scoring and clustering
"""

from biaslens.shared.helpers import js_round, rounded_mean, to_base36

__all__ = ["js_round", "rounded_mean", "to_base36"]
