"""Maven data model classes.

Pure data structures representing parsed POM elements and the derived
effective view. No behavior beyond identity helpers and no imports from
other appdetect modules.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class Coordinate:
    """Maven ``groupId:artifactId[:version]`` coordinates.

    Identity is the ``(group_id, artifact_id)`` pair exposed as ``key``; the
    version is optional because it is frequently unknown before resolution.
    """
    group_id: str
    artifact_id: str
    version: Optional[str] = None

    @property
    def key(self) -> tuple:
        return (self.group_id, self.artifact_id)

    def __str__(self) -> str:
        if self.version:
            return f"{self.group_id}:{self.artifact_id}:{self.version}"
        return f"{self.group_id}:{self.artifact_id}"


@dataclass
class Dependency:
    """A Maven ``<dependency>`` element.

    Used for both ``<dependencies>`` and ``<dependencyManagement>`` entries.

    Attributes:
        group_id: Maven groupId (e.g. ``org.postgresql``).
        artifact_id: Maven artifactId (e.g. ``postgresql``).
        version: Explicit version string, or ``None`` if managed elsewhere.
        scope: Maven scope (compile, provided, runtime, test, system or import).
        dep_type: Optional packaging type (e.g. ``pom`` for BOM imports).
        optional: Whether the dependency is marked ``<optional>true</optional>``.
    """
    group_id: str
    artifact_id: str
    version: Optional[str] = None
    scope: str = "compile"
    dep_type: Optional[str] = None
    optional: bool = False

    @property
    def key(self) -> tuple:
        return (self.group_id, self.artifact_id)

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(self.group_id, self.artifact_id, self.version)


@dataclass
class Plugin:
    """A Maven ``<build><plugins><plugin>`` element.

    Attributes:
        group_id: Plugin groupId (defaults to ``org.apache.maven.plugins``).
        artifact_id: Plugin artifactId (e.g. ``frontend-maven-plugin``).
        version: Explicit version, or ``None`` if inherited from pluginManagement.
    """
    group_id: str
    artifact_id: str
    version: Optional[str] = None


@dataclass
class PomNode:
    """Central parse result for a single ``pom.xml`` file.

    A node with a non-empty ``modules`` list is an aggregator; any other node
    is a leaf and a candidate runnable project. Nodes are not mutated once
    parsed: substitution and resolution produce new objects.

    Attributes:
        path: Absolute path of the descriptor file. Unique within a run.
        group_id: Maven groupId (inherited from parent if not declared).
        artifact_id: Maven artifactId.
        version: Version string (inherited from parent if not declared).
        packaging: Packaging type such as jar, pom or war.
        name: Human-readable ``<name>`` element.
        parent: Coordinates from the ``<parent>`` element, if any.
        properties: Raw ``<properties>`` dict, unsubstituted.
        dependencies: Direct ``<dependencies>`` list.
        dep_management: ``<dependencyManagement>`` dependencies (BOMs and managed deps).
        plugins: ``<build><plugins>`` list.
        modules: Declared ``<modules>`` entries, in declaration order.
    """
    path: Path
    group_id: str
    artifact_id: str
    version: Optional[str] = None
    packaging: str = "jar"
    name: Optional[str] = None
    parent: Optional[Coordinate] = None
    properties: dict = field(default_factory=dict)
    dependencies: list = field(default_factory=list)
    dep_management: list = field(default_factory=list)
    plugins: list = field(default_factory=list)
    modules: list = field(default_factory=list)

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(self.group_id, self.artifact_id, self.version)

    @property
    def directory(self) -> Path:
        return self.path.parent

    @property
    def is_aggregator(self) -> bool:
        return bool(self.modules)


@dataclass
class EffectiveView:
    """A descriptor after inheritance and placeholder resolution.

    Recomputed on demand and owned by the caller; never cached on the node.

    Attributes:
        coordinate: The descriptor's own substituted coordinates.
        dependencies: Dependencies with versions resolved, or ``""`` where no
            managed version was found. Unresolvable placeholders are kept verbatim.
        properties: The full property set used for substitution.
        plugins: Build plugins of the descriptor and its parents.
    """
    coordinate: Coordinate
    dependencies: list = field(default_factory=list)
    properties: dict = field(default_factory=dict)
    plugins: list = field(default_factory=list)
