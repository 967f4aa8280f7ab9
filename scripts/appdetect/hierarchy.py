"""Multi-module hierarchy reconstruction.

Descriptors arrive in directory-traversal order, so a child may be seen
before the parent that declares it. The resolver therefore keeps every
discovered node, and for aggregators (nodes with ``<modules>``) a registry
from declared module path to the aggregator that declared it. Parent lookups
walk ``<parent>`` coordinates through the discovered nodes; ownership is
checked by walking declared-module chains through the registry.

One resolver instance belongs to one top-level traversal. It is not thread
safe and is never shared between independent traversals.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .errors import CyclicParentChain
from .pom_models import Coordinate, PomNode
from .pom_parser import POM_FILE_NAME

logger = logging.getLogger(__name__)

# Parents that are published by a framework rather than owned by the
# project. A walk reaching one of these stops: nothing above it is local.
FRAMEWORK_DEFAULT_PARENTS = frozenset({
    ("org.springframework.boot", "spring-boot-starter-parent"),
})


def is_framework_default_parent(coordinate: Optional[Coordinate]) -> bool:
    return coordinate is not None and coordinate.key in FRAMEWORK_DEFAULT_PARENTS


def normalize_pom_path(path) -> Path:
    """Normalize a descriptor path for registry lookups.

    Collapses ``..`` segments without touching the file system and folds the
    descriptor file name to its canonical spelling.
    """
    p = Path(os.path.normpath(os.path.abspath(path)))
    if p.name.lower() == POM_FILE_NAME:
        p = p.with_name(POM_FILE_NAME)
    return p


def module_pom_path(aggregator: PomNode, module: str) -> Path:
    """Resolve a ``<module>`` entry to the descriptor path it designates.

    Entries ending in ``.xml`` name a descriptor file directly; any other
    entry names a directory holding ``pom.xml``.
    """
    target = aggregator.directory / module
    if not module.lower().endswith(".xml"):
        target = target / POM_FILE_NAME
    return normalize_pom_path(target)


@dataclass
class HierarchyResolution:
    """Outcome of placing one leaf in the discovered hierarchy.

    Attributes:
        parent_aggregator: Nearest ancestor aggregator that declares the leaf
            through its module chain, or ``None``.
        parents: In-tree parent chain, root-most first.
        cyclic: ``True`` when the parent walk was aborted because of a cycle.
    """
    parent_aggregator: Optional[PomNode] = None
    parents: list = field(default_factory=list)
    cyclic: bool = False


class HierarchyResolver:
    """Incrementally built forest of discovered descriptors.

    Example:
        >>> resolver = HierarchyResolver()
        >>> resolver.add(parse_pom(root / "pom.xml"))
        True
        >>> web = parse_pom(root / "web" / "pom.xml")
        >>> resolver.add(web)
        False
        >>> resolver.resolve(web).parent_aggregator.artifact_id
        'parent'
    """

    def __init__(self):
        self._nodes: dict = {}         # normalized descriptor path -> PomNode
        self._aggregators: list = []   # registration order
        self._registry: dict = {}      # normalized module path -> owning aggregator

    def __len__(self) -> int:
        return len(self._nodes)

    @property
    def aggregators(self) -> list:
        return list(self._aggregators)

    def add(self, node: PomNode) -> bool:
        """Record a newly parsed descriptor.

        Aggregators also register every declared module path. When a module
        path is already registered the newer aggregator wins.

        Returns:
            ``True`` if the node is an aggregator, ``False`` for a leaf.
        """
        self._nodes[normalize_pom_path(node.path)] = node
        if not node.is_aggregator:
            return False
        for module in node.modules:
            module_path = module_pom_path(node, module)
            previous = self._registry.get(module_path)
            if previous is not None and previous is not node:
                logger.debug("Module %s re-declared by %s (was %s)", module_path, node.path, previous.path)
            self._registry[module_path] = node
        self._aggregators.append(node)
        logger.debug("Registered aggregator %s with modules %s", node.coordinate, node.modules)
        return True

    def owner_of(self, pom_path) -> Optional[PomNode]:
        """Return the aggregator that declared ``pom_path`` as a module, if any."""
        return self._registry.get(normalize_pom_path(pom_path))

    def find_node(self, coordinate: Coordinate) -> Optional[PomNode]:
        """Find a discovered descriptor by ``(groupId, artifactId)``.

        Aggregators are searched first in registration order, then all other
        nodes in discovery order. The first match wins.
        """
        for aggregator in self._aggregators:
            if aggregator.coordinate.key == coordinate.key:
                return aggregator
        for node in self._nodes.values():
            if node.coordinate.key == coordinate.key:
                return node
        return None

    def parent_chain(self, node: PomNode) -> list:
        """Walk ``<parent>`` references through the discovered nodes.

        The walk stops at a parent that is not in the tree or at a framework
        default parent. It is bounded by the number of discovered nodes.

        Returns:
            In-tree ancestors, nearest first.

        Raises:
            CyclicParentChain: If a coordinate already on the walk is revisited.
        """
        chain = []
        path = [node.coordinate]
        current = node.parent
        while current is not None and not is_framework_default_parent(current):
            if any(c.key == current.key for c in path) or len(chain) > len(self._nodes):
                raise CyclicParentChain(path + [current])
            parent = self.find_node(current)
            if parent is None:
                logger.debug("Parent %s of %s is not in the tree", current, node.path)
                break
            path.append(current)
            chain.append(parent)
            current = parent.parent
        return chain

    def is_descendant(self, leaf: PomNode, aggregator: PomNode) -> bool:
        """Check whether ``aggregator`` declares ``leaf`` through a module chain.

        Starts at the aggregator that declared the leaf's path and follows
        each owner's own declaring aggregator upward. An owner matches when it
        is the aggregator itself or carries the same coordinates.
        """
        owner = self.owner_of(leaf.path)
        visited = set()
        while owner is not None:
            if owner is aggregator or owner.coordinate.key == aggregator.coordinate.key:
                return True
            owner_path = normalize_pom_path(owner.path)
            if owner_path in visited:
                break
            visited.add(owner_path)
            owner = self._registry.get(owner_path)
        return False

    def resolve(self, leaf: PomNode) -> HierarchyResolution:
        """Place ``leaf`` in the hierarchy discovered so far.

        A cyclic parent chain is reported as "no parent resolved" rather than
        an error.
        """
        try:
            chain = self.parent_chain(leaf)
        except CyclicParentChain as e:
            logger.warning("%s; treating %s as having no parent", e.message, leaf.path)
            return HierarchyResolution(cyclic=True)
        aggregator = next(
            (p for p in chain if p.is_aggregator and self.is_descendant(leaf, p)),
            None,
        )
        return HierarchyResolution(parent_aggregator=aggregator, parents=list(reversed(chain)))
