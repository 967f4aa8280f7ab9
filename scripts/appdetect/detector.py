"""Per-directory project detection for Maven projects.

``JavaDetector.detect_project`` is called once per visited directory by the
traversal driver. Aggregator descriptors are recorded and yield ``None`` so
the traversal keeps descending; leaf descriptors are resolved against the
hierarchy discovered so far and turned into a Project record with inferred
platform requirements.
"""

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .classifier import classify, detect_metadata, detect_plugin_dependencies
from .config_overlay import load_configuration
from .detection import detect_spring_boot_version, is_spring_boot_application
from .effective import DescriptorCatalog, synthesize_effective_view
from .errors import MalformedDescriptor, ResolutionUnavailable
from .hierarchy import HierarchyResolver
from .pom_models import EffectiveView, PomNode
from .pom_parser import is_pom_file, parse_pom
from .renderer import DEFAULT_TIMEOUT, EffectivePomRenderer
from .requirements import Database, ProjectMetadata, requirement_sort_key
from .rules import DEPENDENCY_RULES

logger = logging.getLogger(__name__)

LANGUAGE_JAVA = "java"
DETECTION_RULE = "Inferred by presence of: pom.xml"


@dataclass
class DetectorOptions:
    """Engine configuration for one traversal.

    Attributes:
        use_effective_pom: Render each leaf through ``mvn help:effective-pom``.
        maven_command: Maven executable; ``None`` picks ``mvnw`` then ``mvn``.
        timeout: Seconds allowed per effective-POM rendering.
        bom_descriptors: Extra local descriptor files used for BOM imports
            and parents that live outside the scanned tree.
    """
    use_effective_pom: bool = False
    maven_command: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT
    bom_descriptors: list = field(default_factory=list)


@dataclass
class Project:
    """A runnable Maven project and what it needs from the platform.

    Attributes:
        language: Always ``java`` for this detector.
        path: Directory holding the project's pom.xml.
        detection_rule: Human-readable reason for the detection.
        requirements: Inferred requirements, sorted for presentation.
        dependencies: Project dependency tags such as ``spring-frontend``.
        metadata: Application name, datasource names and dependency flags.
        spring_boot_version: Detected version or ``unknown``.
        parent_path: Directory of the owning aggregator, if one was resolved.
    """
    language: str
    path: Path
    detection_rule: str
    requirements: list = field(default_factory=list)
    dependencies: list = field(default_factory=list)
    metadata: ProjectMetadata = field(default_factory=ProjectMetadata)
    spring_boot_version: str = ""
    parent_path: Optional[Path] = None

    @property
    def database_deps(self) -> list:
        return sorted(r.kind for r in self.requirements if isinstance(r, Database))

    def to_dict(self) -> dict:
        return {
            "language": self.language,
            "path": str(self.path),
            "detectionRule": self.detection_rule,
            "databaseDeps": self.database_deps,
            "requirements": [
                {"type": type(r).__name__, "display": r.display, **_fields(r)} for r in self.requirements
            ],
            "dependencies": list(self.dependencies),
            "metadata": {
                "applicationName": self.metadata.application_name,
                "databaseNames": dict(self.metadata.database_names),
                "flags": sorted(self.metadata.flags),
            },
            "springBootVersion": self.spring_boot_version,
            "parentPath": str(self.parent_path) if self.parent_path else None,
        }


def _fields(requirement) -> dict:
    return {k: list(v) if isinstance(v, tuple) else v for k, v in vars(requirement).items()}


def infer_requirements(project: Project, node: PomNode, parents: list, view: EffectiveView,
                       rules: tuple = DEPENDENCY_RULES) -> Project:
    """Run the classifier over an effective view and fill in ``project``.

    Runtime configuration is only loaded for Spring Boot applications.
    """
    configuration = {}
    if is_spring_boot_application(node, view.dependencies):
        configuration = load_configuration(project.path)
    else:
        logger.debug("Not a Spring Boot application, skipping configuration. path = %s", project.path)
    project.spring_boot_version = detect_spring_boot_version(node, parents, view.properties)
    found = classify(view.dependencies, configuration, rules, project.spring_boot_version)
    project.requirements = sorted(found, key=requirement_sort_key)
    project.metadata = detect_metadata(view.dependencies, configuration)
    project.dependencies = detect_plugin_dependencies(view.plugins)
    return project


class JavaDetector:
    """Detects Maven projects across one directory traversal.

    Owns the HierarchyResolver for that traversal; create a new detector for
    every independent traversal. ``rules`` replaces the built-in dependency
    rule table.
    """

    def __init__(self, options: Optional[DetectorOptions] = None,
                 renderer: Optional[EffectivePomRenderer] = None,
                 rules: tuple = DEPENDENCY_RULES):
        self.options = options or DetectorOptions()
        self.rules = rules
        self.resolver = HierarchyResolver()
        self.catalog = DescriptorCatalog(fallback=self.resolver.find_node)
        for bom_path in self.options.bom_descriptors:
            try:
                self.catalog.add(parse_pom(bom_path))
            except MalformedDescriptor as e:
                logger.warning("Ignoring BOM descriptor: %s", e.message)
        if renderer is None and self.options.use_effective_pom:
            renderer = EffectivePomRenderer(self.options.maven_command, self.options.timeout)
        self.renderer = renderer

    @property
    def language(self) -> str:
        return LANGUAGE_JAVA

    def detect_project(self, path, entries, cancel: Optional[threading.Event] = None) -> Optional[Project]:
        """Inspect one directory.

        Args:
            path: The directory being visited.
            entries: Its entries, as names, ``os.DirEntry`` or ``Path`` objects.
            cancel: Cancels a running effective-POM rendering.

        Returns:
            A Project for a leaf descriptor, otherwise ``None`` (no pom.xml,
            an aggregator, or an unreadable descriptor).
        """
        for entry in entries:
            name = getattr(entry, "name", entry)
            if not is_pom_file(name):
                continue
            try:
                node = parse_pom(Path(path) / name)
            except MalformedDescriptor as e:
                logger.warning("Skipping %s", e.message)
                return None
            if self.resolver.add(node):
                # Aggregator: keep descending, the modules are detected on their own.
                return None
            return self.analyze(node, cancel)
        return None

    def analyze(self, node: PomNode, cancel: Optional[threading.Event] = None) -> Project:
        """Resolve a leaf descriptor and infer its requirements."""
        hierarchy = self.resolver.resolve(node)
        effective_pom = None
        if self.renderer is not None:
            try:
                effective_pom = self.renderer.render(node.path, cancel)
            except ResolutionUnavailable as e:
                logger.warning("%s; using local resolution only", e.message)
        view = synthesize_effective_view(
            node,
            hierarchy.parents,
            effective_pom,
            lookup=self.catalog.lookup,
            external_parents=not hierarchy.cyclic,
        )
        project = Project(
            language=LANGUAGE_JAVA,
            path=node.directory,
            detection_rule=DETECTION_RULE,
            parent_path=hierarchy.parent_aggregator.directory if hierarchy.parent_aggregator else None,
        )
        return infer_requirements(project, node, hierarchy.parents, view, self.rules)
