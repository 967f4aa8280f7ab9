"""Inferred platform requirements and project metadata.

Requirements are immutable and hashable so a classification result can be
held in a set; every sequence field is a sorted tuple.
"""

from dataclasses import dataclass, field
from typing import Optional

DB_POSTGRES = "postgres"
DB_MYSQL = "mysql"
DB_REDIS = "redis"
DB_MONGO = "mongo"
DB_COSMOS = "cosmos"

DATABASE_DISPLAY = {
    DB_POSTGRES: "PostgreSQL",
    DB_MYSQL: "MySQL",
    DB_REDIS: "Redis",
    DB_MONGO: "MongoDB",
    DB_COSMOS: "Cosmos DB",
}

SERVICE_BUS = "service-bus"
EVENT_HUBS = "event-hubs"


@dataclass(frozen=True)
class Database:
    kind: str

    @property
    def display(self) -> str:
        return DATABASE_DISPLAY.get(self.kind, self.kind)


@dataclass(frozen=True)
class MessageQueue:
    """A queue broker; ``destinations`` are the queue names, if known."""
    kind: str
    destinations: tuple = ()
    is_jms: bool = False

    @property
    def display(self) -> str:
        return "Azure Service Bus (JMS)" if self.is_jms else "Azure Service Bus"


@dataclass(frozen=True)
class EventStream:
    """An event streaming service.

    ``uses_alternate_protocol`` is set when the project talks to the stream
    over the Kafka protocol rather than the native one.
    """
    kind: str
    names: tuple = ()
    uses_alternate_protocol: bool = False
    spring_boot_version: str = ""

    @property
    def display(self) -> str:
        return "Azure Event Hubs (Kafka)" if self.uses_alternate_protocol else "Azure Event Hubs"


@dataclass(frozen=True)
class ObjectStorage:
    container_names: tuple = ()

    @property
    def display(self) -> str:
        return "Azure Storage Account"


_ORDER = {Database: 0, MessageQueue: 1, EventStream: 2, ObjectStorage: 3}


def requirement_sort_key(requirement) -> tuple:
    """Presentation order: variant first, then its fields."""
    return (_ORDER.get(type(requirement), len(_ORDER)), repr(requirement))


@dataclass
class ProjectMetadata:
    """Free-form facts for the scaffolding step.

    Attributes:
        application_name: Value of ``spring.application.name``.
        database_names: Database kind → name parsed from ``spring.datasource.url``.
        flags: Names of dependency flags that were found, e.g.
            ``contains_dependency_spring_cloud_eureka_server``.
    """
    application_name: Optional[str] = None
    database_names: dict = field(default_factory=dict)
    flags: set = field(default_factory=set)

    def has(self, flag: str) -> bool:
        return flag in self.flags
