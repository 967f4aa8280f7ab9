"""Dependency classification against the rule tables.

``classify`` is deterministic and independent of the order of its inputs;
callers sort the resulting set for presentation.
"""

import logging
from typing import Optional

from .detection import get_database_name
from .pom_models import Coordinate
from .requirements import ProjectMetadata
from .rules import (
    DATASOURCE_URL_PREFIXES, DEPENDENCY_RULES, METADATA_FLAG_RULES, PLUGIN_DEPENDENCY_RULES,
    RuleContext,
)

logger = logging.getLogger(__name__)


def log_detected(resource: str, group_id: str, artifact_id: str, extra_condition: str = ""):
    extra_condition = extra_condition.strip()
    inserted = f" and {extra_condition}" if extra_condition else ""
    logger.info("Detected '%s' because found dependency '%s:%s' in pom.xml file%s.",
                resource, group_id, artifact_id, inserted)


def classify(dependencies: list, configuration: Optional[dict] = None,
             rules: tuple = DEPENDENCY_RULES, spring_boot_version: str = "") -> frozenset:
    """Infer platform requirements from resolved dependencies.

    Args:
        dependencies: Resolved dependencies; only ``(groupId, artifactId)`` is used.
        configuration: Flattened runtime configuration (see config_overlay).
        rules: The rule table to apply.
        spring_boot_version: Carried into requirements that need it.

    Returns:
        The set of inferred requirements.
    """
    configuration = configuration or {}
    present = {dep.key for dep in dependencies}
    result = set()
    for rule in rules:
        matched = next((alt for alt in rule.alternatives if tuple(alt) in present), None)
        if matched is None:
            continue
        ctx = RuleContext(
            matched=tuple(matched),
            configuration=configuration,
            spring_boot_version=spring_boot_version,
        )
        for built in rule.build(ctx):
            requirement, extra_condition = built if isinstance(built, tuple) else (built, "")
            log_detected(requirement.display, *matched, extra_condition)
            result.add(requirement)
    return frozenset(result)


def detect_metadata(dependencies: list, configuration: Optional[dict] = None) -> ProjectMetadata:
    """Collect application name, datasource database name and dependency flags."""
    configuration = configuration or {}
    metadata = ProjectMetadata(application_name=configuration.get("spring.application.name"))

    url = configuration.get("spring.datasource.url")
    if url is not None:
        name = get_database_name(url)
        if name is None:
            logger.info("can not get database name from property: spring.datasource.url")
        for prefix, kind in DATASOURCE_URL_PREFIXES.items():
            if name and url.startswith(prefix):
                metadata.database_names[kind] = name

    present = {dep.key for dep in dependencies}
    for key, flag in METADATA_FLAG_RULES.items():
        if key in present:
            metadata.flags.add(flag)
            logger.info("Metadata updated. %s = true.", flag)
    return metadata


def detect_plugin_dependencies(plugins: list) -> list:
    """Project dependency tags implied by build plugins, sorted."""
    found = set()
    for plugin in plugins:
        tag = PLUGIN_DEPENDENCY_RULES.get(Coordinate(plugin.group_id, plugin.artifact_id).key)
        if tag:
            found.add(tag)
    return sorted(found)
