"""Asset graph: asset types, persistence and the resolving store."""

from assetgraph.asset.base import Asset, AssetFile, Parents
from assetgraph.asset.persist import DiskFileFetcher, FileFetcher, write_files
from assetgraph.asset.store import AssetState, ResolutionSession, Store

__all__ = [
    # Asset types
    "Asset",
    "AssetFile",
    "Parents",
    # Persistence
    "DiskFileFetcher",
    "FileFetcher",
    "write_files",
    # Resolution
    "AssetState",
    "ResolutionSession",
    "Store",
]
