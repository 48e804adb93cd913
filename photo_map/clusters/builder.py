from __future__ import annotations

import math
from typing import Iterable, List, Literal

import numpy as np

from photo_map.core.config import DEFAULT_CLUSTER_DISTANCE
from photo_map.core.models import Cluster, PhotoRecord

ClusterStrategy = Literal["first", "nearest"]


def anchor_distance(record: PhotoRecord, anchor: PhotoRecord) -> float:
    """Euclidean distance in raw (lat, lng) degree space, not geodesic."""
    return math.hypot(record.latitude - anchor.latitude, record.longitude - anchor.longitude)


def _first_match(records: Iterable[PhotoRecord], threshold: float) -> List[Cluster]:
    clusters: List[Cluster] = []
    for record in records:
        for cluster in clusters:
            if anchor_distance(record, cluster[0]) < threshold:
                cluster.append(record)
                break
        else:
            clusters.append([record])
    return clusters


def _nearest_anchor(records: Iterable[PhotoRecord], threshold: float) -> List[Cluster]:
    clusters: List[Cluster] = []
    anchors = np.empty((0, 2), dtype=float)
    for record in records:
        point = np.array([record.latitude, record.longitude], dtype=float)
        if len(clusters):
            distances = np.hypot(*(anchors - point).T)
            best = int(np.argmin(distances))
            # argmin returns the earliest cluster on ties, matching first-match order.
            if distances[best] < threshold:
                clusters[best].append(record)
                continue
        clusters.append([record])
        anchors = np.vstack([anchors, point])
    return clusters


def cluster_photos(
    records: Iterable[PhotoRecord],
    distance_threshold: float = DEFAULT_CLUSTER_DISTANCE,
    strategy: ClusterStrategy = "first",
) -> List[Cluster]:
    """
    Greedy single-pass proximity clustering.

    Each record is compared against the anchor (first member) of every open
    cluster in creation order. With strategy="first" it joins the first
    cluster whose anchor is strictly closer than distance_threshold; with
    strategy="nearest" it joins the closest such anchor. Records matching no
    anchor open a new cluster and become its permanent anchor. Results depend
    on input order.
    """
    if distance_threshold < 0 or math.isnan(distance_threshold):
        raise ValueError(f"distance_threshold must be non-negative, got {distance_threshold}")
    if strategy == "first":
        return _first_match(records, distance_threshold)
    if strategy == "nearest":
        return _nearest_anchor(records, distance_threshold)
    raise ValueError(f"Unknown cluster strategy: {strategy!r}")
