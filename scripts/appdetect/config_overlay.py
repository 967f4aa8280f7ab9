"""Spring runtime configuration loading.

Builds one flat ``key -> value`` mapping from ``application.properties`` /
``application.yml`` / ``application.yaml`` and, for each active profile,
their ``application-<profile>.*`` variants. Later files override earlier
ones. YAML is flattened to dot-separated keys with ``[index]`` suffixes for
list entries. Missing files are treated as empty.
"""

import logging
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

RESOURCES_DIR = Path("src") / "main" / "resources"
ACTIVE_PROFILE_KEY = "spring.profiles.active"


def read_properties_file(path: Path, result: dict):
    """Merge ``key=value`` lines into ``result``.

    Blank lines and ``#`` comments are ignored, as are lines without ``=``.
    """
    if not path.is_file():
        return
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.warning("Skipping unreadable properties file %s: %s", path, e)
        return
    for line in text.splitlines():
        if not line.strip() or line.lstrip().startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if sep:
            result[key.strip()] = value.strip()


def flatten_yaml_node(prefix: str, node, result: dict, path: frozenset = frozenset()):
    """Recursively flatten a composed YAML node into ``result``.

    Scalar text is kept exactly as written (``on`` stays ``on``, ``08``
    stays ``08``). Mapping entries with non-scalar keys are skipped, as are
    aliases that point back at a node already on the current path.
    """
    if id(node) in path:
        logger.debug("Skipping recursive YAML alias at %s", prefix or "<root>")
        return
    path = path | {id(node)}
    if isinstance(node, yaml.MappingNode):
        for key_node, value_node in node.value:
            if not isinstance(key_node, yaml.ScalarNode):
                continue
            key = f"{prefix}.{key_node.value}" if prefix else key_node.value
            flatten_yaml_node(key, value_node, result, path)
    elif isinstance(node, yaml.SequenceNode):
        for i, item in enumerate(node.value):
            flatten_yaml_node(f"{prefix}[{i}]", item, result, path)
    elif isinstance(node, yaml.ScalarNode):
        result[prefix] = node.value


def read_yaml_file(path: Path, result: dict):
    """Merge a YAML file into ``result``; multiple documents apply in order."""
    if not path.is_file():
        return
    try:
        with open(path, encoding="utf-8") as f:
            for document in yaml.compose_all(f, Loader=yaml.SafeLoader):
                if document is not None:
                    flatten_yaml_node("", document, result)
    except (OSError, ValueError, yaml.YAMLError) as e:
        logger.warning("Skipping malformed YAML file %s: %s", path, e)


def _apply(resources: Path, stem: str, result: dict):
    read_properties_file(resources / f"{stem}.properties", result)
    read_yaml_file(resources / f"{stem}.yml", result)
    read_yaml_file(resources / f"{stem}.yaml", result)


def active_profiles(configuration: dict) -> list:
    value = configuration.get(ACTIVE_PROFILE_KEY, "")
    return [p.strip() for p in value.split(",") if p.strip()]


def load_configuration(project_dir) -> dict:
    """Load the merged runtime configuration of a project directory.

    Args:
        project_dir: Directory holding the project's pom.xml.

    Returns:
        Flat mapping; empty when no configuration files exist.
    """
    resources = Path(project_dir) / RESOURCES_DIR
    result = {}
    _apply(resources, "application", result)
    for profile in active_profiles(result):
        logger.debug("Applying profile '%s' configuration in %s", profile, resources)
        _apply(resources, f"application-{profile}", result)
    return result
