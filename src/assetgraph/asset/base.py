"""Core asset types.

An asset is one node in the graph of things needed to stand up a
cluster: an install config, a credential, a Terraform state file. Each
asset declares the assets it depends on, knows how to generate itself
from those dependencies, and knows how to recognize its own output from
a previous run.

Example:
    class Greeting(Asset):
        name = "Greeting"

        def dependencies(self) -> list[Asset]:
            return [InstallConfig()]

        def generate(self, parents: Parents) -> None:
            config = parents.get(InstallConfig)
            self.file_list = [AssetFile("greeting.txt", config.config.name.encode())]
"""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from assetgraph.asset.persist import FileFetcher


@dataclass(frozen=True)
class AssetFile:
    """A file produced by an asset.

    Attributes:
        filename: Path relative to the asset directory, '/'-separated
        data: Raw file contents
    """

    filename: str
    data: bytes = field(repr=False)

    def __post_init__(self):
        path = PurePosixPath(self.filename)
        if not self.filename or path.is_absolute() or ".." in path.parts:
            raise ValueError(f"invalid asset filename: {self.filename!r}")


class Asset(ABC):
    """Base class for every node in the asset graph.

    Subclasses set ``name`` and implement ``dependencies``, ``generate``
    and ``load``. Output is kept in ``file_list``.
    """

    name: str = "Asset"

    def __init__(self):
        self.file_list: list[AssetFile] = []

    @abstractmethod
    def dependencies(self) -> list[Asset]:
        """Assets that must be resolved before this one is generated.

        Must be free of side effects and return the same classes, in the
        same order, every time it is called.
        """

    @abstractmethod
    def generate(self, parents: Parents) -> None:
        """Produce this asset from its resolved dependencies.

        Raises on failure. Files staged in ``file_list`` before raising
        are still persisted as diagnostics.
        """

    def load(self, fetcher: FileFetcher) -> bool:
        """Look for output from a previous run.

        Returns:
            True if the asset hydrated itself from disk and needs no
            generation, False if nothing was found

        Raises:
            AlreadyExistsError: If output exists but reusing or
                regenerating it would be unsafe
        """
        return False

    def files(self) -> list[AssetFile]:
        """Files currently held by this asset."""
        return list(self.file_list)

    def __repr__(self):
        return f"<{type(self).__name__} {self.name!r}>"


A = TypeVar("A", bound=Asset)


class Parents(Mapping[type, Asset]):
    """Read-only view of an asset's resolved dependencies.

    ``get`` hands out shallow copies with their own ``file_list``, so a
    dependent can neither rebind attributes nor add files on the shared,
    already-resolved instance. Other attribute values (such as a parsed
    config) are still shared and must not be mutated in place.
    """

    def __init__(self, resolved: Mapping[type, Asset]):
        self._resolved = dict(resolved)

    def get(self, cls: type[A]) -> A:  # type: ignore[override]
        """Return a copy of the resolved dependency of type ``cls``.

        Raises:
            KeyError: If ``cls`` is not a resolved dependency
        """
        try:
            asset = self._resolved[cls]
        except KeyError:
            raise KeyError(f"{cls.__name__} is not a dependency of this asset") from None
        view = copy.copy(asset)
        view.file_list = list(asset.file_list)
        return view  # type: ignore[return-value]

    def __getitem__(self, cls: type) -> Asset:
        return self.get(cls)

    def __iter__(self) -> Iterator[type]:
        return iter(self._resolved)

    def __len__(self) -> int:
        return len(self._resolved)
