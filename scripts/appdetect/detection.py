"""Spring Boot detection heuristics.

Inspects parsed Maven data to answer questions about the project's
framework, which decides whether runtime configuration is worth loading and
which Spring Boot version a requirement should carry.
"""

import re
from typing import Optional

from .placeholders import replace_placeholders
from .pom_models import PomNode

SPRING_BOOT_GROUP = "org.springframework.boot"
SPRING_BOOT_PARENT = "spring-boot-starter-parent"
SPRING_BOOT_BOM = "spring-boot-dependencies"
UNKNOWN_SPRING_BOOT_VERSION = "unknown"

_DATABASE_NAME = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")


def is_spring_boot_application(module: PomNode, dependencies: Optional[list] = None) -> bool:
    """Check whether the module is a Spring Boot application.

    Detection checks:
        1. Parent POM is ``org.springframework.boot:spring-boot-starter-parent``
        2. A dependency ``org.springframework.boot:spring-boot-starter*``

    Args:
        module: The descriptor to check.
        dependencies: Dependencies to inspect instead of the module's own,
            typically the effective view's.

    Returns:
        ``True`` if Spring Boot is detected.
    """
    if module.parent is not None and module.parent.key == (SPRING_BOOT_GROUP, SPRING_BOOT_PARENT):
        return True
    deps = module.dependencies if dependencies is None else dependencies
    return any(
        d.group_id == SPRING_BOOT_GROUP and d.artifact_id.startswith("spring-boot-starter")
        for d in deps
    )


def _spring_boot_version_of(module: PomNode, properties: dict) -> Optional[str]:
    """Version from the starter parent, else from a managed ``spring-boot-dependencies``."""
    if module.parent is not None and module.parent.artifact_id == SPRING_BOOT_PARENT:
        if module.parent.version:
            return replace_placeholders(module.parent.version, properties)
    for dep in module.dep_management:
        if dep.artifact_id == SPRING_BOOT_BOM and dep.version:
            return replace_placeholders(dep.version, properties)
    return None


def detect_spring_boot_version(module: PomNode, parents: list, properties: Optional[dict] = None) -> str:
    """Detect the Spring Boot version, checking the module before its parents.

    Args:
        module: The leaf descriptor.
        parents: Resolved parent chain, root-most first.
        properties: Property set used to substitute ``${...}`` versions.

    Returns:
        Version string, or ``UNKNOWN_SPRING_BOOT_VERSION``.
    """
    properties = properties or {}
    for candidate in [module] + list(reversed(parents)):
        version = _spring_boot_version_of(candidate, properties)
        if version:
            return version
    return UNKNOWN_SPRING_BOOT_VERSION


def is_valid_database_name(name: str) -> bool:
    """Lowercase alphanumerics separated by single hyphens, 3 to 63 characters."""
    return 3 <= len(name) <= 63 and _DATABASE_NAME.match(name) is not None


def get_database_name(datasource_url: str) -> Optional[str]:
    """Extract the database name from a JDBC URL.

    Takes the segment after the last ``/`` and drops any query string, e.g.
    ``jdbc:postgresql://host:5432/orders-db?ssl=true`` → ``orders-db``.

    Returns:
        The name, or ``None`` if absent or not a valid database name.
    """
    slash = datasource_url.rfind("/")
    if slash == -1:
        return None
    name = datasource_url[slash + 1:].split("?", 1)[0]
    return name if is_valid_database_name(name) else None
