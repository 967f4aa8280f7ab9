"""Shared test fixtures for the project detection test suite."""

import textwrap
from pathlib import Path

import pytest


@pytest.fixture
def tmp_pom(tmp_path):
    """Factory fixture that writes a pom.xml to a temp directory and returns the path."""
    def _write(content: str) -> Path:
        pom = tmp_path / "pom.xml"
        pom.write_text(textwrap.dedent(content), encoding="utf-8")
        return pom
    return _write


@pytest.fixture
def write_file(tmp_path):
    """Factory fixture that writes ``content`` to ``tmp_path / relative``.

    Parent directories are created as needed.
    """
    def _write(relative: str, content: str) -> Path:
        target = tmp_path / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(textwrap.dedent(content), encoding="utf-8")
        return target
    return _write


ROOT_POM = """\
    <?xml version="1.0" encoding="UTF-8"?>
    <project xmlns="http://maven.apache.org/POM/4.0.0">
        <groupId>com.example</groupId>
        <artifactId>parent</artifactId>
        <version>1.0.0</version>
        <packaging>pom</packaging>
        <properties>
            <postgres.version>42.6.0</postgres.version>
        </properties>
        <modules>
            <module>services</module>
            <module>tools/cli-pom.xml</module>
        </modules>
        <dependencyManagement>
            <dependencies>
                <dependency>
                    <groupId>org.postgresql</groupId>
                    <artifactId>postgresql</artifactId>
                    <version>${postgres.version}</version>
                </dependency>
            </dependencies>
        </dependencyManagement>
    </project>
"""

SERVICES_POM = """\
    <?xml version="1.0" encoding="UTF-8"?>
    <project xmlns="http://maven.apache.org/POM/4.0.0">
        <parent>
            <groupId>com.example</groupId>
            <artifactId>parent</artifactId>
            <version>1.0.0</version>
        </parent>
        <artifactId>services</artifactId>
        <packaging>pom</packaging>
        <modules>
            <module>orders</module>
        </modules>
    </project>
"""

ORDERS_POM = """\
    <?xml version="1.0" encoding="UTF-8"?>
    <project xmlns="http://maven.apache.org/POM/4.0.0">
        <parent>
            <groupId>com.example</groupId>
            <artifactId>services</artifactId>
            <version>1.0.0</version>
        </parent>
        <artifactId>orders</artifactId>
        <dependencies>
            <dependency>
                <groupId>org.springframework.boot</groupId>
                <artifactId>spring-boot-starter-web</artifactId>
                <version>3.0.0</version>
            </dependency>
            <dependency>
                <groupId>org.postgresql</groupId>
                <artifactId>postgresql</artifactId>
            </dependency>
        </dependencies>
    </project>
"""


@pytest.fixture
def multi_module_tree(write_file, tmp_path):
    """A three-level tree: parent aggregator -> services aggregator -> orders leaf.

    Returns the tree root directory.
    """
    write_file("pom.xml", ROOT_POM)
    write_file("services/pom.xml", SERVICES_POM)
    write_file("services/orders/pom.xml", ORDERS_POM)
    write_file("services/orders/src/main/resources/application.properties", """\
        spring.application.name=orders
        spring.datasource.url=jdbc:postgresql://localhost:5432/orders-db
    """)
    return tmp_path
