"""Effective view synthesis.

Computes a leaf descriptor's dependencies with inherited properties
substituted and versions resolved through the managed-dependency chain.
For each ``(groupId, artifactId)`` the version is taken from, in order:

    1. the dependency's own ``<version>``
    2. the leaf's ``<dependencyManagement>``
    3. each parent's ``<dependencyManagement>``, nearest parent first
    4. BOM imports (``type=pom``, ``scope=import``) of the leaf, then of its
       parents, resolved recursively by this same order
    5. the externally rendered effective POM, when one was supplied

A dependency found by none of these keeps an empty version. A version still
holding an unknown ``${...}`` after substitution is reported verbatim.
"""

import dataclasses
import logging
from typing import Callable, Optional

from .errors import MalformedDescriptor
from .placeholders import collect_properties, replace_placeholders, substitute_dependency
from .pom_models import Coordinate, EffectiveView, PomNode
from .pom_parser import is_bom_import, parse_pom_text

logger = logging.getLogger(__name__)


class DescriptorCatalog:
    """Descriptors available for BOM imports and parents outside the tree.

    Lookups prefer an exact ``groupId:artifactId:version`` match. When the
    requested version is empty, or nothing matched exactly, the ``fallback``
    (typically the hierarchy resolver's ``find_node``) is consulted.
    """

    def __init__(self, nodes=(), fallback: Optional[Callable] = None):
        self._by_gav: dict = {}
        self._fallback = fallback
        for node in nodes:
            self.add(node)

    def __len__(self) -> int:
        return len(self._by_gav)

    def add(self, node: PomNode):
        self._by_gav.setdefault((node.group_id, node.artifact_id, node.version), node)

    def lookup(self, coordinate: Coordinate) -> Optional[PomNode]:
        node = self._by_gav.get((coordinate.group_id, coordinate.artifact_id, coordinate.version))
        if node is None and not coordinate.version:
            node = next((n for (g, a, _), n in self._by_gav.items() if (g, a) == coordinate.key), None)
        if node is None and self._fallback is not None:
            node = self._fallback(coordinate)
        return node


def _external_ancestors(top: PomNode, lookup: Optional[Callable], seen: set) -> list:
    """Ancestors of ``top`` that only the lookup knows about, nearest first."""
    result = []
    current = top.parent
    while lookup is not None and current is not None and current.key not in seen:
        seen.add(current.key)
        parent = lookup(current)
        if parent is None:
            break
        result.append(parent)
        current = parent.parent
    return result


def _managed_version(scopes: list, properties: dict, key: tuple,
                     lookup: Optional[Callable], visited: set) -> Optional[str]:
    """Search managed sets in ``scopes`` (nearest first), then their BOM imports."""
    for scope in scopes:
        for managed in scope.dep_management:
            managed = substitute_dependency(managed, properties)
            if not is_bom_import(managed) and managed.key == key and managed.version:
                return managed.version
    if lookup is None:
        return None
    for scope in scopes:
        for managed in scope.dep_management:
            managed = substitute_dependency(managed, properties)
            if not is_bom_import(managed):
                continue
            bom_id = (managed.group_id, managed.artifact_id, managed.version)
            if bom_id in visited:
                continue
            visited.add(bom_id)
            bom = lookup(managed.coordinate)
            if bom is None:
                logger.debug("BOM %s is not available locally", managed.coordinate)
                continue
            bom_scopes = [bom] + _external_ancestors(bom, lookup, {bom.coordinate.key})
            bom_properties = collect_properties(bom, list(reversed(bom_scopes[1:])))
            version = _managed_version(bom_scopes, bom_properties, key, lookup, visited)
            if version:
                return version
    return None


def _rendered_version(rendered: Optional[PomNode], key: tuple) -> Optional[str]:
    if rendered is None:
        return None
    for dep in rendered.dependencies + rendered.dep_management:
        if dep.key == key and dep.version:
            return dep.version
    return None


def parse_effective_pom(effective_pom: Optional[str], leaf: PomNode) -> Optional[PomNode]:
    """Parse a rendered effective POM, treating malformed output as absent."""
    if not effective_pom:
        return None
    try:
        return parse_pom_text(effective_pom, leaf.path)
    except MalformedDescriptor as e:
        logger.warning("Ignoring effective POM for %s: %s", leaf.path, e.cause)
        return None


def synthesize_effective_view(leaf: PomNode, parents: list = (), effective_pom: Optional[str] = None,
                              lookup: Optional[Callable] = None, external_parents: bool = True) -> EffectiveView:
    """Produce the effective view of ``leaf``.

    Args:
        leaf: The descriptor to resolve.
        parents: In-tree parent chain, root-most first.
        effective_pom: Optional ``help:effective-pom`` output for the leaf.
            Its properties override local ones and its versions are the
            last resort before leaving a version empty.
        lookup: ``lookup(Coordinate) -> PomNode | None`` for BOM imports and
            for parents above the in-tree chain.
        external_parents: Whether to follow <parent> above the in-tree chain
            through ``lookup``. Disabled for leaves whose parent walk was cyclic.

    Returns:
        An EffectiveView. Dependencies declared by the leaf come first, then
        those inherited from parents that the leaf does not redeclare.
    """
    parents = list(parents)
    top = parents[0] if parents else leaf
    seen = {leaf.coordinate.key} | {p.coordinate.key for p in parents}
    external = _external_ancestors(top, lookup, seen) if external_parents else []
    ancestors = list(reversed(external)) + parents

    properties = collect_properties(leaf, ancestors)
    rendered = parse_effective_pom(effective_pom, leaf)
    if rendered is not None:
        properties.update(rendered.properties)

    scopes = [leaf] + list(reversed(ancestors))
    declared = []
    seen_keys = set()
    for scope in scopes:
        for dep in scope.dependencies:
            dep = substitute_dependency(dep, properties)
            if dep.key in seen_keys:
                continue
            seen_keys.add(dep.key)
            declared.append(dep)

    resolved = []
    for dep in declared:
        version = (
            dep.version
            or _managed_version(scopes, properties, dep.key, lookup, set())
            or _rendered_version(rendered, dep.key)
            or ""
        )
        resolved.append(dataclasses.replace(dep, version=version))

    plugins = []
    plugin_keys = set()
    for scope in scopes:
        for plugin in scope.plugins:
            if (plugin.group_id, plugin.artifact_id) not in plugin_keys:
                plugin_keys.add((plugin.group_id, plugin.artifact_id))
                plugins.append(plugin)

    coordinate = Coordinate(
        replace_placeholders(leaf.group_id, properties),
        replace_placeholders(leaf.artifact_id, properties),
        replace_placeholders(leaf.version, properties),
    )
    return EffectiveView(coordinate=coordinate, dependencies=resolved, properties=properties, plugins=plugins)
