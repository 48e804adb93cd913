"""Proximity clustering of photo records."""

from .builder import anchor_distance, cluster_photos

__all__ = ["anchor_distance", "cluster_photos"]
