"""Render an asset's dependency graph."""

from __future__ import annotations

from dataclasses import dataclass, field

from assetgraph.asset.base import Asset
from assetgraph.exceptions import DependencyCycleError


@dataclass
class _Node:
    asset: Asset
    deps: list[type] = field(default_factory=list)


class AssetGraph:
    """Static dependency graph reachable from a root asset.

    Built from ``dependencies()`` alone; nothing is loaded or generated.
    """

    def __init__(self, root: Asset):
        self.root = type(root)
        self.nodes: dict[type, _Node] = {}
        self._walk(root, [])

    def _walk(self, asset: Asset, stack: list[type]) -> None:
        cls = type(asset)
        if cls in stack:
            start = stack.index(cls)
            chain = [self.nodes[c].asset.name for c in stack[start:]]
            raise DependencyCycleError(chain + [asset.name])
        if cls in self.nodes:
            return

        node = _Node(asset)
        self.nodes[cls] = node
        stack.append(cls)
        for dep in asset.dependencies():
            node.deps.append(type(dep))
            self._walk(dep, stack)
        stack.pop()

    def name(self, cls: type) -> str:
        return self.nodes[cls].asset.name

    def edges(self) -> list[tuple[str, str]]:
        """(dependency, dependent) name pairs, sorted."""
        return sorted(
            (self.name(dep), node.asset.name)
            for node in self.nodes.values()
            for dep in node.deps
        )

    def to_dot(self) -> str:
        """Generate GraphViz DOT format representation.

        Returns:
            String containing DOT format graph
        """
        lines = [
            "digraph assets {",
            "  rankdir=LR;",
            "  node [shape=box, style=rounded];",
            "",
        ]
        for name in sorted(node.asset.name for node in self.nodes.values()):
            lines.append(f'  "{name}";')
        lines.append("")
        for dep, dependent in self.edges():
            lines.append(f'  "{dep}" -> "{dependent}";')
        lines.append("}")
        return "\n".join(lines)

    def to_mermaid(self) -> str:
        """Generate Mermaid diagram format.

        Returns:
            String containing Mermaid format graph
        """
        ids = {
            node.asset.name: f"n{i}"
            for i, node in enumerate(sorted(self.nodes.values(), key=lambda n: n.asset.name))
        }
        lines = ["graph LR"]
        for name, node_id in ids.items():
            lines.append(f'    {node_id}["{name}"]')
        for dep, dependent in self.edges():
            lines.append(f"    {ids[dep]} --> {ids[dependent]}")
        return "\n".join(lines)

    def to_tree(self) -> str:
        """Indented tree from the root; shared dependencies are repeated."""
        lines: list[str] = []

        def visit(cls: type, depth: int) -> None:
            lines.append(f"{'  ' * depth}{self.name(cls)}")
            for dep in self.nodes[cls].deps:
                visit(dep, depth + 1)

        visit(self.root, 0)
        return "\n".join(lines)
