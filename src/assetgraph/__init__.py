"""
assetgraph
----------
Resolve, generate and persist the assets needed to launch a cluster.

Usage:
    from assetgraph.asset import Store
    from assetgraph.asset.cluster import Cluster

    Store("install-dir").fetch(Cluster())
"""

__version__ = "0.1.0"
