"""Maven ``${property}`` substitution.

Substitution is single-pass: a substituted value that itself contains a
placeholder is not expanded again, and placeholders whose name is unknown
are left verbatim. Recursive property chains are a known limitation.
"""

import dataclasses
import re
from typing import Optional

from .pom_models import Dependency, PomNode

PLACEHOLDER = re.compile(r"\$\{([^}]+)\}")


def replace_placeholders(value: Optional[str], properties: dict) -> Optional[str]:
    """Replace every ``${name}`` in ``value`` with ``properties[name]``.

    Args:
        value: The string potentially containing placeholders, or ``None``.
        properties: Mapping of property name to value.

    Returns:
        The substituted string. Unknown names are kept as ``${name}``.
        ``None`` and strings without placeholders are returned unchanged.
    """
    if not value or "${" not in value:
        return value
    return PLACEHOLDER.sub(lambda m: properties.get(m.group(1), m.group(0)), value)


def has_placeholder(value: Optional[str]) -> bool:
    """Check whether a value still carries an unresolved ``${...}`` reference."""
    return bool(value) and PLACEHOLDER.search(value) is not None


def builtin_properties(node: PomNode) -> dict:
    """Model properties Maven exposes for every project.

    Both the ``project.`` and the deprecated ``pom.`` spellings are provided.
    """
    props = {
        "project.groupId": node.group_id,
        "project.artifactId": node.artifact_id,
        "project.packaging": node.packaging,
        "basedir": str(node.directory),
        "project.basedir": str(node.directory),
    }
    if node.version:
        props["project.version"] = node.version
    if node.name:
        props["project.name"] = node.name
    if node.parent is not None:
        props["project.parent.groupId"] = node.parent.group_id
        props["project.parent.artifactId"] = node.parent.artifact_id
        if node.parent.version:
            props["project.parent.version"] = node.parent.version
    for key in [k for k in props if k.startswith("project.")]:
        props["pom." + key[len("project."):]] = props[key]
    return props


def collect_properties(node: PomNode, parents: list) -> dict:
    """Accessible property set of ``node``.

    Ancestors' ``<properties>`` are applied root-most first so nearer
    declarations override farther ones; the node's own properties and its
    model properties are applied last.

    Args:
        node: The descriptor being resolved.
        parents: Resolved parent chain, root-most first.
    """
    props = {}
    for ancestor in parents:
        props.update(ancestor.properties)
    props.update(node.properties)
    props.update(builtin_properties(node))
    return props


def substitute_dependency(dep: Dependency, properties: dict) -> Dependency:
    """Return a copy of ``dep`` with its string fields substituted."""
    return dataclasses.replace(
        dep,
        group_id=replace_placeholders(dep.group_id, properties),
        artifact_id=replace_placeholders(dep.artifact_id, properties),
        version=replace_placeholders(dep.version, properties),
        scope=replace_placeholders(dep.scope, properties),
        dep_type=replace_placeholders(dep.dep_type, properties),
    )
