"""Routing: asset normalization, pool lookup, reserve reads and path search."""

from dexroute.routing.locator import PoolLocator
from dexroute.routing.normalizer import AssetNormalizer
from dexroute.routing.pathfinding import candidate_paths
from dexroute.routing.reserves import ReserveReader
from dexroute.routing.router import Router, select_best

__all__ = [
    "AssetNormalizer",
    "PoolLocator",
    "ReserveReader",
    "Router",
    "candidate_paths",
    "select_best",
]
