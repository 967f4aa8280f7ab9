"""Dependency-to-requirement rule tables.

Pure data plus the small constructors the table refers to. Each rule lists
coordinate alternatives (any one of them present is enough) and a builder
that turns the match into requirements. New resource kinds are added by
appending a rule; the classifier itself does not change.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable

from .requirements import (
    DB_COSMOS, DB_MONGO, DB_MYSQL, DB_POSTGRES, DB_REDIS, EVENT_HUBS, SERVICE_BUS,
    Database, EventStream, MessageQueue, ObjectStorage,
)

logger = logging.getLogger(__name__)

# Runtime configuration keys of the form
# ``<namespace>.bindings.<channel>.destination`` name a binder destination.
BINDING_NAMESPACE = "spring.cloud.stream"

# Channel names containing this marker are consumer channels, e.g. ``consume-in-0``.
CONSUMER_MARKER = "-in-"

CHECKPOINT_CONTAINER_PROPERTY = "spring.cloud.azure.eventhubs.processor.checkpoint-store.container-name"


@dataclass(frozen=True)
class RuleContext:
    """What a builder may inspect besides the matched coordinate."""
    matched: tuple
    configuration: dict = field(default_factory=dict)
    spring_boot_version: str = ""


@dataclass(frozen=True)
class DependencyRule:
    """One row of the table.

    Attributes:
        name: Short identifier used in diagnostics.
        alternatives: ``(groupId, artifactId)`` pairs; the first present one matches.
        build: Constructor producing the requirements for a match. An item may
            be a ``(requirement, extra_condition)`` pair to qualify its log line.
    """
    name: str
    alternatives: tuple
    build: Callable


def find_binding_destinations(configuration: dict, namespace: str = BINDING_NAMESPACE) -> dict:
    """Find every ``<namespace>.bindings.<channel>.destination`` entry.

    Returns:
        Channel name → destination, ordered by channel name.
    """
    prefix = f"{namespace}.bindings."
    suffix = ".destination"
    result = {}
    for key in sorted(configuration):
        if key.startswith(prefix) and key.endswith(suffix) and len(key) > len(prefix) + len(suffix):
            result[key[len(prefix):-len(suffix)]] = str(configuration[key])
    return result


def distinct_destinations(bindings: dict) -> tuple:
    return tuple(sorted(set(bindings.values())))


def consumer_channels(bindings: dict) -> list:
    return [channel for channel in bindings if CONSUMER_MARKER in channel]


def database(kind: str) -> Callable:
    return lambda ctx: [Database(kind)]


def jms_queue(kind: str) -> Callable:
    return lambda ctx: [MessageQueue(kind, is_jms=True)]


def bound_destinations(make: Callable, checkpoint_property: str = "",
                       namespace: str = BINDING_NAMESPACE) -> Callable:
    """Builder for binder coordinates whose destinations live in configuration.

    Args:
        make: ``make(destinations, ctx)`` returning the main requirement.
            Duplicate destinations are collapsed before the call.
        checkpoint_property: When set and a consumer channel exists, an
            ObjectStorage requirement is added whose container name is the
            value of this configuration key. It is returned paired with the
            binding condition that triggered it.
        namespace: Binding key namespace.
    """
    def build(ctx: RuleContext) -> list:
        bindings = find_binding_destinations(ctx.configuration, namespace)
        for channel, destination in bindings.items():
            logger.info("  Detected destination [%s] for binding [%s] by analyzing property file.",
                        destination, channel)
        result = [make(distinct_destinations(bindings), ctx)]
        consumers = consumer_channels(bindings)
        if checkpoint_property and consumers:
            container = ctx.configuration.get(checkpoint_property)
            storage = ObjectStorage(container_names=(container,) if container else ())
            result.append((storage, f"binding name [{consumers[0]}] contains '{CONSUMER_MARKER}'"))
        return result
    return build


DEPENDENCY_RULES = (
    DependencyRule("postgresql", (("org.postgresql", "postgresql"),), database(DB_POSTGRES)),
    DependencyRule("mysql", (("com.mysql", "mysql-connector-j"),), database(DB_MYSQL)),
    DependencyRule(
        "redis",
        (
            ("org.springframework.boot", "spring-boot-starter-data-redis"),
            ("org.springframework.boot", "spring-boot-starter-data-redis-reactive"),
        ),
        database(DB_REDIS),
    ),
    DependencyRule(
        "mongo",
        (
            ("org.springframework.boot", "spring-boot-starter-data-mongodb"),
            ("org.springframework.boot", "spring-boot-starter-data-mongodb-reactive"),
        ),
        database(DB_MONGO),
    ),
    DependencyRule(
        "cosmos",
        (("com.azure.spring", "spring-cloud-azure-starter-data-cosmos"),),
        database(DB_COSMOS),
    ),
    DependencyRule(
        "service-bus-jms",
        (("com.azure.spring", "spring-cloud-azure-starter-servicebus-jms"),),
        jms_queue(SERVICE_BUS),
    ),
    DependencyRule(
        "service-bus-binder",
        (("com.azure.spring", "spring-cloud-azure-stream-binder-servicebus"),),
        bound_destinations(lambda names, ctx: MessageQueue(SERVICE_BUS, destinations=names)),
    ),
    DependencyRule(
        "event-hubs-binder",
        (("com.azure.spring", "spring-cloud-azure-stream-binder-eventhubs"),),
        bound_destinations(
            lambda names, ctx: EventStream(EVENT_HUBS, names=names),
            checkpoint_property=CHECKPOINT_CONTAINER_PROPERTY,
        ),
    ),
    DependencyRule(
        "kafka-binder",
        (("org.springframework.cloud", "spring-cloud-starter-stream-kafka"),),
        bound_destinations(
            lambda names, ctx: EventStream(
                EVENT_HUBS, names=names, uses_alternate_protocol=True,
                spring_boot_version=ctx.spring_boot_version,
            ),
        ),
    ),
)

# Dependency → metadata flag. Flags are set on ProjectMetadata.flags.
METADATA_FLAG_RULES = {
    ("com.azure.spring", "spring-cloud-azure-starter"):
        "contains_dependency_spring_cloud_azure_starter",
    ("com.azure.spring", "spring-cloud-azure-starter-jdbc-postgresql"):
        "contains_dependency_spring_cloud_azure_starter_jdbc_postgresql",
    ("com.azure.spring", "spring-cloud-azure-starter-jdbc-mysql"):
        "contains_dependency_spring_cloud_azure_starter_jdbc_mysql",
    ("org.springframework.cloud", "spring-cloud-starter-netflix-eureka-server"):
        "contains_dependency_spring_cloud_eureka_server",
    ("org.springframework.cloud", "spring-cloud-starter-netflix-eureka-client"):
        "contains_dependency_spring_cloud_eureka_client",
    ("org.springframework.cloud", "spring-cloud-config-server"):
        "contains_dependency_spring_cloud_config_server",
    ("org.springframework.cloud", "spring-cloud-starter-config"):
        "contains_dependency_spring_cloud_config_client",
}

# Build plugin → project dependency tag.
PLUGIN_DEPENDENCY_RULES = {
    ("com.github.eirslett", "frontend-maven-plugin"): "spring-frontend",
}

# JDBC URL prefix → database kind, for ``spring.datasource.url``.
DATASOURCE_URL_PREFIXES = {
    "jdbc:postgresql": DB_POSTGRES,
    "jdbc:mysql": DB_MYSQL,
}
