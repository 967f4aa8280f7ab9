"""Maven POM parsing and XML helpers.

Handles all interaction with pom.xml content: coordinates, parent, modules,
dependencies, dependency management, build plugins and properties. Parsing
is structural only: unknown elements are ignored and missing optional
elements default to empty. No property resolution happens here.
"""

import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Union

from .errors import MalformedDescriptor
from .pom_models import Coordinate, Dependency, Plugin, PomNode

logger = logging.getLogger(__name__)

# XML namespace used by Maven POM files (POM model version 4.0.0).
NS = {"m": "http://maven.apache.org/POM/4.0.0"}

# Canonical descriptor file name. Matched case-insensitively; alternate
# file names are not supported.
POM_FILE_NAME = "pom.xml"


def _local(tag: str) -> str:
    """Strip the ``{namespace}`` prefix from an element tag."""
    return tag.split("}")[-1] if "}" in tag else tag


def _find(el, tag, ns=NS):
    """Find a direct child XML element, trying with and without the Maven namespace.

    Args:
        el: Parent XML element to search within.
        tag: Tag name to look for (without namespace prefix).
        ns: Namespace mapping (defaults to Maven POM 4.0.0).

    Returns:
        The first matching child element, or ``None`` if not found.
    """
    result = el.find(f"m:{tag}", ns)
    if result is not None:
        return result
    return el.find(tag)


def _findall(el, tag, ns=NS) -> list:
    """Find all direct children named ``tag``, namespaced or not."""
    return list(el.findall(f"m:{tag}", ns)) + list(el.findall(tag))


def _text(el, tag, ns=NS):
    """Extract the stripped text content of a child element.

    Returns:
        Stripped text content, or ``None`` if the element doesn't exist or is empty.
    """
    child = _find(el, tag, ns)
    if child is not None and child.text and child.text.strip():
        return child.text.strip()
    return None


def _parse_dependency(dep_el) -> Dependency:
    """Parse a ``<dependency>`` XML element into a Dependency dataclass."""
    optional_text = _text(dep_el, "optional")
    return Dependency(
        group_id=_text(dep_el, "groupId") or "",
        artifact_id=_text(dep_el, "artifactId") or "",
        version=_text(dep_el, "version"),
        scope=_text(dep_el, "scope") or "compile",
        dep_type=_text(dep_el, "type"),
        optional=bool(optional_text) and optional_text.lower() == "true",
    )


def _parse_dependencies(container) -> list:
    """Parse the ``<dependency>`` children of a ``<dependencies>`` element."""
    if container is None:
        return []
    return [_parse_dependency(d) for d in _findall(container, "dependency")]


def _parse_plugin(plugin_el) -> Plugin:
    """Parse a ``<plugin>`` XML element.

    If groupId is absent, defaults to ``org.apache.maven.plugins``.
    """
    return Plugin(
        group_id=_text(plugin_el, "groupId") or "org.apache.maven.plugins",
        artifact_id=_text(plugin_el, "artifactId") or "",
        version=_text(plugin_el, "version"),
    )


def parse_pom_element(root, pom_path: Path) -> PomNode:
    """Build a PomNode from an already parsed ``<project>`` element.

    Args:
        root: The ``<project>`` XML element.
        pom_path: Path recorded on the node.

    Returns:
        A populated PomNode. groupId and version fall back to the
        ``<parent>`` values when not declared.
    """
    parent = None
    parent_el = _find(root, "parent")
    if parent_el is not None:
        parent = Coordinate(
            group_id=_text(parent_el, "groupId") or "",
            artifact_id=_text(parent_el, "artifactId") or "",
            version=_text(parent_el, "version"),
        )

    properties = {}
    props_el = _find(root, "properties")
    if props_el is not None:
        for child in props_el:
            if not isinstance(child.tag, str):
                continue  # comments
            properties[_local(child.tag)] = (child.text or "").strip()

    dep_mgmt = []
    dm_el = _find(root, "dependencyManagement")
    if dm_el is not None:
        dep_mgmt = _parse_dependencies(_find(dm_el, "dependencies"))

    plugins = []
    build_el = _find(root, "build")
    if build_el is not None:
        plugins_el = _find(build_el, "plugins")
        if plugins_el is not None:
            plugins = [_parse_plugin(p) for p in _findall(plugins_el, "plugin")]

    modules = []
    modules_el = _find(root, "modules")
    if modules_el is not None:
        for mod_el in _findall(modules_el, "module"):
            if mod_el.text and mod_el.text.strip():
                modules.append(mod_el.text.strip())

    return PomNode(
        path=pom_path,
        group_id=_text(root, "groupId") or (parent.group_id if parent else ""),
        artifact_id=_text(root, "artifactId") or "",
        version=_text(root, "version") or (parent.version if parent else None),
        packaging=_text(root, "packaging") or "jar",
        name=_text(root, "name"),
        parent=parent,
        properties=properties,
        dependencies=_parse_dependencies(_find(root, "dependencies")),
        dep_management=dep_mgmt,
        plugins=plugins,
        modules=modules,
    )


def parse_pom_text(content: Union[str, bytes], pom_path: Path) -> PomNode:
    """Parse POM content that has already been read into memory.

    Raises:
        MalformedDescriptor: If the content is not well-formed XML or its
            root element is not ``<project>``.
    """
    try:
        root = ET.fromstring(content)
    except ET.ParseError as e:
        raise MalformedDescriptor(pom_path, e) from e
    if _local(root.tag) != "project":
        raise MalformedDescriptor(pom_path, ValueError(f"unexpected root element <{_local(root.tag)}>"))
    return parse_pom_element(root, pom_path)


def parse_pom(pom_path: Path) -> PomNode:
    """Parse a ``pom.xml`` file into a PomNode.

    Handles both namespaced and non-namespaced POM files. The recorded path
    is made absolute so it can serve as the node's identity.

    Raises:
        MalformedDescriptor: If the file cannot be read or parsed.
    """
    pom_path = Path(pom_path).absolute()
    try:
        content = pom_path.read_bytes()
    except OSError as e:
        raise MalformedDescriptor(pom_path, e) from e
    node = parse_pom_text(content, pom_path)
    logger.debug("Parsed %s as %s (%d modules, %d dependencies)",
                 pom_path, node.coordinate, len(node.modules), len(node.dependencies))
    return node


def is_pom_file(name: str) -> bool:
    """Check whether a directory entry name is the canonical descriptor file."""
    return name.lower() == POM_FILE_NAME


def is_bom_import(dep: Dependency) -> bool:
    """Check whether a dependency is a BOM import (``type=pom``, ``scope=import``).

    Args:
        dep: The dependency to check.

    Returns:
        ``True`` if this is a BOM import in ``<dependencyManagement>``.
    """
    return dep.dep_type == "pom" and dep.scope == "import"
