"""Resolve an asset's dependency graph and materialize it.

A resolution run walks the graph depth-first from the requested asset.
For every reachable asset it:

1. resolves the asset's dependencies (stopping at the first failure),
2. asks the asset to ``load`` output from a previous run,
3. otherwise ``generate``s it from its resolved parents,
4. writes the asset's files to the asset directory.

Assets are memoized per run by concrete class, so each is loaded or
generated at most once no matter how many dependents share it.

Example:
    store = Store("install-dir")
    cluster = store.fetch(Cluster())
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from assetgraph.asset.base import Asset, Parents
from assetgraph.asset.persist import DiskFileFetcher, FileFetcher, write_files
from assetgraph.exceptions import (
    AssetGenerationError,
    AssetLoadError,
    AssetPersistError,
    DependencyCycleError,
)
from assetgraph.log import logger

logger = logger.getChild(__name__)


class AssetState(Enum):
    UNVISITED = "unvisited"
    RESOLVING = "resolving"
    RESOLVED = "resolved"
    FAILED = "failed"


@dataclass
class _Entry:
    asset: Asset
    state: AssetState = AssetState.UNVISITED
    error: BaseException | None = None
    loaded: bool = False


class ResolutionSession:
    """Memo table and traversal state for one resolution run.

    Create one per run; ``Store.fetch`` does this for you.
    """

    def __init__(self, directory: Path, fetcher: FileFetcher):
        self.directory = directory
        self.fetcher = fetcher
        self._entries: dict[type, _Entry] = {}
        self._stack: list[type] = []
        # Classes generated (not loaded) this run, in generation order
        self.generated: list[type] = []

    def state(self, cls: type) -> AssetState:
        entry = self._entries.get(cls)
        return entry.state if entry else AssetState.UNVISITED

    def resolve(self, asset: Asset) -> Asset:
        """Resolve ``asset`` and everything it depends on.

        Returns:
            The resolved instance for ``type(asset)``; the memoized one if
            the class was already resolved earlier in this run

        Raises:
            DependencyCycleError: If the graph has a cycle
            AssetFailedError: If this asset or a dependency failed; a
                dependency's error is re-raised unchanged
        """
        cls = type(asset)
        entry = self._entries.get(cls)
        if entry is not None:
            if entry.state is AssetState.RESOLVED:
                return entry.asset
            if entry.state is AssetState.FAILED:
                raise entry.error  # type: ignore[misc]
            if entry.state is AssetState.RESOLVING:
                start = self._stack.index(cls)
                chain = [self._entries[c].asset.name for c in self._stack[start:]]
                raise DependencyCycleError(chain + [asset.name])

        entry = _Entry(asset=asset, state=AssetState.RESOLVING)
        self._entries[cls] = entry
        self._stack.append(cls)
        logger.debug("Resolving \"%s\"", asset.name)
        try:
            self._resolve_entry(entry)
        except DependencyCycleError:
            # Not a runtime condition: leave nothing memoized for it
            del self._entries[cls]
            raise
        except Exception as exc:
            entry.state = AssetState.FAILED
            entry.error = exc
            raise
        finally:
            self._stack.pop()

        entry.state = AssetState.RESOLVED
        return entry.asset

    def _resolve_entry(self, entry: _Entry) -> None:
        asset = entry.asset

        parents = {}
        for dep in asset.dependencies():
            resolved = self.resolve(dep)
            parents[type(resolved)] = resolved

        try:
            found = asset.load(self.fetcher)
        except Exception as exc:
            raise AssetLoadError(asset.name, exc) from exc
        if found:
            logger.debug("Loaded \"%s\" from %s", asset.name, self.directory)
            entry.loaded = True
            return

        logger.debug("Generating \"%s\"", asset.name)
        try:
            asset.generate(Parents(parents))
        except Exception as exc:
            error = AssetGenerationError(asset.name, exc)
            self._persist_diagnostics(asset)
            raise error from exc
        except BaseException:
            # Interrupted: keep whatever was staged, then let it propagate
            self._persist_diagnostics(asset)
            raise
        self.generated.append(type(asset))

        try:
            write_files(self.directory, asset.files())
        except OSError as exc:
            raise AssetPersistError(asset.name, exc) from exc

    def _persist_diagnostics(self, asset: Asset) -> None:
        files = asset.files()
        if not files:
            return
        try:
            write_files(self.directory, files)
        except OSError as exc:
            logger.error("Failed to write files for \"%s\" after generation failed: %s", asset.name, exc)


class Store:
    """Entry point for fetching assets into an asset directory."""

    def __init__(self, directory: str | Path = "."):
        self.directory = Path(directory)

    def session(self) -> ResolutionSession:
        """Start a new resolution run with an empty memo table."""
        return ResolutionSession(self.directory, DiskFileFetcher(self.directory))

    def fetch(self, asset: Asset) -> Asset:
        """Resolve ``asset`` in a fresh run and return the resolved instance."""
        return self.session().resolve(asset)
