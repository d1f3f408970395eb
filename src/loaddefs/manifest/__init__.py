"""Manifests: aggregation, rendering and writing."""

from loaddefs.manifest.aggregator import Manifest, Section, aggregate
from loaddefs.manifest.render import render_manifest
from loaddefs.manifest.writer import write_if_changed

__all__ = [
    "Manifest",
    "Section",
    "aggregate",
    "render_manifest",
    "write_if_changed",
]
