"""Capture package"""
from .evidence import EvidenceAggregator
from .artifact_store import ArtifactStore, ArtifactKind

__all__ = ["EvidenceAggregator", "ArtifactStore", "ArtifactKind"]
