"""Pruning pipeline.

This module merges kind listings, filters stale resources and deletes them.

Classes:
    FanIn: Merges independent kind listings into one stream
    ResourcePruner: Consumption loop producing the run report
"""

from __future__ import annotations

__all__ = [
    "FanIn",
    "ResourcePruner",
]

from .fanin import FanIn
from .pruner import ResourcePruner
