"""Terraform templates shipped with assetgraph.

Layout:
    terraform/config.tf           shared variables
    terraform/<platform>/*.tf     per-platform resources
"""

from __future__ import annotations

from importlib import resources
from pathlib import Path
from typing import TYPE_CHECKING

from assetgraph.types import PLATFORMS

if TYPE_CHECKING:
    from importlib.resources.abc import Traversable

CONFIG_TEMPLATE = "config.tf"


def _templates() -> Traversable:
    return resources.files(__name__).joinpath("terraform")


def _copy_tree(src: Traversable, dest: Path) -> list[Path]:
    dest.mkdir(parents=True, exist_ok=True)
    written = []
    for entry in sorted(src.iterdir(), key=lambda e: e.name):
        if entry.is_dir():
            written.extend(_copy_tree(entry, dest / entry.name))
        elif entry.name.endswith(".tf"):
            target = dest / entry.name
            target.write_bytes(entry.read_bytes())
            written.append(target)
    return written


def unpack(directory: str | Path, platform: str) -> list[Path]:
    """Materialize a platform's Terraform package into ``directory``.

    Copies the platform's templates and the shared ``config.tf``.

    Args:
        directory: Terraform working directory
        platform: Platform name, one of ``assetgraph.types.PLATFORMS``

    Returns:
        Paths of the files written

    Raises:
        ValueError: If there is no package for ``platform``
    """
    package = _templates().joinpath(platform)
    if platform not in PLATFORMS or not package.is_dir():
        raise ValueError(f"no terraform package for platform {platform!r}")

    directory = Path(directory)
    written = _copy_tree(package, directory)

    config = directory / CONFIG_TEMPLATE
    config.write_bytes(_templates().joinpath(CONFIG_TEMPLATE).read_bytes())
    written.append(config)
    return written
