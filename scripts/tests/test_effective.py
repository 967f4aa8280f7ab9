"""Tests for effective.py — effective view synthesis and version precedence."""

import textwrap
from pathlib import Path

import pytest

from appdetect.effective import DescriptorCatalog, synthesize_effective_view
from appdetect.pom_models import Coordinate, Dependency
from appdetect.pom_parser import parse_pom_text

SPRING_BOOT_DEPENDENCIES = """\
    <project xmlns="http://maven.apache.org/POM/4.0.0">
        <groupId>org.springframework.boot</groupId>
        <artifactId>spring-boot-dependencies</artifactId>
        <version>3.0.0</version>
        <packaging>pom</packaging>
        <properties>
            <slf4j.version>2.0.4</slf4j.version>
        </properties>
        <dependencyManagement>
            <dependencies>
                <dependency>
                    <groupId>org.slf4j</groupId>
                    <artifactId>slf4j-api</artifactId>
                    <version>${slf4j.version}</version>
                </dependency>
            </dependencies>
        </dependencyManagement>
    </project>
"""

SPRING_BOOT_STARTER_PARENT = """\
    <project xmlns="http://maven.apache.org/POM/4.0.0">
        <parent>
            <groupId>org.springframework.boot</groupId>
            <artifactId>spring-boot-dependencies</artifactId>
            <version>3.0.0</version>
        </parent>
        <artifactId>spring-boot-starter-parent</artifactId>
        <packaging>pom</packaging>
    </project>
"""


def pom(content, rel="app/pom.xml"):
    return parse_pom_text(textwrap.dedent(content), Path("/repo").absolute() / rel)


@pytest.fixture
def catalog():
    return DescriptorCatalog([
        pom(SPRING_BOOT_DEPENDENCIES, "m2/spring-boot-dependencies/pom.xml"),
        pom(SPRING_BOOT_STARTER_PARENT, "m2/spring-boot-starter-parent/pom.xml"),
    ])


class TestDeclaredDependencies:
    def test_two_dependencies(self):
        leaf = pom("""\
            <project>
                <groupId>com.example</groupId>
                <artifactId>app</artifactId>
                <version>1.0.0</version>
                <dependencies>
                    <dependency>
                        <groupId>org.springframework.boot</groupId>
                        <artifactId>spring-boot-starter-web</artifactId>
                        <version>3.0.0</version>
                    </dependency>
                    <dependency>
                        <groupId>org.postgresql</groupId>
                        <artifactId>postgresql</artifactId>
                        <version>42.6.0</version>
                        <scope>runtime</scope>
                    </dependency>
                </dependencies>
            </project>
        """)
        view = synthesize_effective_view(leaf)
        assert view.dependencies == [
            Dependency("org.springframework.boot", "spring-boot-starter-web", "3.0.0", "compile"),
            Dependency("org.postgresql", "postgresql", "42.6.0", "runtime"),
        ]
        assert view.coordinate == Coordinate("com.example", "app", "1.0.0")

    def test_no_dependencies(self):
        leaf = pom("""\
            <project>
                <groupId>com.example</groupId>
                <artifactId>app</artifactId>
            </project>
        """)
        assert synthesize_effective_view(leaf).dependencies == []

    def test_unresolvable_version_left_empty(self):
        leaf = pom("""\
            <project>
                <groupId>com.example</groupId>
                <artifactId>app</artifactId>
                <dependencies>
                    <dependency>
                        <groupId>org.example</groupId>
                        <artifactId>unmanaged</artifactId>
                    </dependency>
                </dependencies>
            </project>
        """)
        assert synthesize_effective_view(leaf).dependencies[0].version == ""

    def test_unknown_placeholder_kept_literal(self):
        leaf = pom("""\
            <project>
                <groupId>com.example</groupId>
                <artifactId>app</artifactId>
                <dependencies>
                    <dependency>
                        <groupId>org.example</groupId>
                        <artifactId>lib</artifactId>
                        <version>${version.spring-boot_2.x}</version>
                    </dependency>
                </dependencies>
            </project>
        """)
        assert synthesize_effective_view(leaf).dependencies[0].version == "${version.spring-boot_2.x}"

    def test_own_property_substituted(self):
        leaf = pom("""\
            <project>
                <groupId>com.example</groupId>
                <artifactId>app</artifactId>
                <properties>
                    <version.spring-boot_2.x>2.7.6</version.spring-boot_2.x>
                </properties>
                <dependencies>
                    <dependency>
                        <groupId>org.springframework.boot</groupId>
                        <artifactId>spring-boot-starter</artifactId>
                        <version>${version.spring-boot_2.x}</version>
                    </dependency>
                </dependencies>
            </project>
        """)
        assert synthesize_effective_view(leaf).dependencies[0].version == "2.7.6"


class TestManagedVersions:
    def test_bom_import(self, catalog):
        leaf = pom("""\
            <project>
                <groupId>com.example</groupId>
                <artifactId>app</artifactId>
                <dependencyManagement>
                    <dependencies>
                        <dependency>
                            <groupId>org.springframework.boot</groupId>
                            <artifactId>spring-boot-dependencies</artifactId>
                            <version>3.0.0</version>
                            <type>pom</type>
                            <scope>import</scope>
                        </dependency>
                    </dependencies>
                </dependencyManagement>
                <dependencies>
                    <dependency>
                        <groupId>org.slf4j</groupId>
                        <artifactId>slf4j-api</artifactId>
                    </dependency>
                </dependencies>
            </project>
        """)
        view = synthesize_effective_view(leaf, lookup=catalog.lookup)
        assert view.dependencies == [Dependency("org.slf4j", "slf4j-api", "2.0.4", "compile")]

    def test_bom_import_version_from_property(self, catalog):
        leaf = pom("""\
            <project>
                <groupId>com.example</groupId>
                <artifactId>app</artifactId>
                <properties>
                    <boot.version>3.0.0</boot.version>
                </properties>
                <dependencyManagement>
                    <dependencies>
                        <dependency>
                            <groupId>org.springframework.boot</groupId>
                            <artifactId>spring-boot-dependencies</artifactId>
                            <version>${boot.version}</version>
                            <type>pom</type>
                            <scope>import</scope>
                        </dependency>
                    </dependencies>
                </dependencyManagement>
                <dependencies>
                    <dependency>
                        <groupId>org.slf4j</groupId>
                        <artifactId>slf4j-api</artifactId>
                    </dependency>
                </dependencies>
            </project>
        """)
        view = synthesize_effective_view(leaf, lookup=catalog.lookup)
        assert view.dependencies[0].version == "2.0.4"

    def test_framework_parent_chain(self, catalog):
        leaf = pom("""\
            <project>
                <parent>
                    <groupId>org.springframework.boot</groupId>
                    <artifactId>spring-boot-starter-parent</artifactId>
                    <version>3.0.0</version>
                </parent>
                <groupId>com.example</groupId>
                <artifactId>app</artifactId>
                <dependencies>
                    <dependency>
                        <groupId>org.slf4j</groupId>
                        <artifactId>slf4j-api</artifactId>
                    </dependency>
                </dependencies>
            </project>
        """)
        view = synthesize_effective_view(leaf, lookup=catalog.lookup)
        assert view.dependencies == [Dependency("org.slf4j", "slf4j-api", "2.0.4", "compile")]

    def test_bom_unavailable(self):
        leaf = pom("""\
            <project>
                <groupId>com.example</groupId>
                <artifactId>app</artifactId>
                <dependencyManagement>
                    <dependencies>
                        <dependency>
                            <groupId>org.springframework.boot</groupId>
                            <artifactId>spring-boot-dependencies</artifactId>
                            <version>3.0.0</version>
                            <type>pom</type>
                            <scope>import</scope>
                        </dependency>
                    </dependencies>
                </dependencyManagement>
                <dependencies>
                    <dependency>
                        <groupId>org.slf4j</groupId>
                        <artifactId>slf4j-api</artifactId>
                    </dependency>
                </dependencies>
            </project>
        """)
        view = synthesize_effective_view(leaf, lookup=DescriptorCatalog().lookup)
        assert view.dependencies[0].version == ""

    def test_leaf_management_beats_grandparent(self):
        grandparent = pom("""\
            <project>
                <groupId>com.example</groupId>
                <artifactId>grandparent</artifactId>
                <version>1.0.0</version>
                <dependencyManagement>
                    <dependencies>
                        <dependency>
                            <groupId>org.slf4j</groupId>
                            <artifactId>slf4j-api</artifactId>
                            <version>2.0.4</version>
                        </dependency>
                    </dependencies>
                </dependencyManagement>
            </project>
        """, "pom.xml")
        parent = pom("""\
            <project>
                <parent>
                    <groupId>com.example</groupId>
                    <artifactId>grandparent</artifactId>
                    <version>1.0.0</version>
                </parent>
                <artifactId>parent</artifactId>
            </project>
        """, "mid/pom.xml")
        leaf = pom("""\
            <project>
                <parent>
                    <groupId>com.example</groupId>
                    <artifactId>parent</artifactId>
                    <version>1.0.0</version>
                </parent>
                <artifactId>app</artifactId>
                <dependencyManagement>
                    <dependencies>
                        <dependency>
                            <groupId>org.slf4j</groupId>
                            <artifactId>slf4j-api</artifactId>
                            <version>2.0.5</version>
                        </dependency>
                    </dependencies>
                </dependencyManagement>
                <dependencies>
                    <dependency>
                        <groupId>org.slf4j</groupId>
                        <artifactId>slf4j-api</artifactId>
                    </dependency>
                </dependencies>
            </project>
        """, "mid/app/pom.xml")
        view = synthesize_effective_view(leaf, [grandparent, parent])
        assert view.dependencies[0].version == "2.0.5"

        # Without the leaf's own entry the grandparent's applies.
        leaf.dep_management = []
        view = synthesize_effective_view(leaf, [grandparent, parent])
        assert view.dependencies[0].version == "2.0.4"

    def test_parent_property_substituted_into_leaf(self):
        parent = pom("""\
            <project>
                <groupId>com.example</groupId>
                <artifactId>parent</artifactId>
                <version>1.0.0</version>
                <properties>
                    <lib.version>3.1</lib.version>
                </properties>
                <dependencies>
                    <dependency>
                        <groupId>org.example</groupId>
                        <artifactId>shared</artifactId>
                        <version>1.1</version>
                    </dependency>
                </dependencies>
            </project>
        """, "pom.xml")
        leaf = pom("""\
            <project>
                <parent>
                    <groupId>com.example</groupId>
                    <artifactId>parent</artifactId>
                    <version>1.0.0</version>
                </parent>
                <artifactId>app</artifactId>
                <dependencies>
                    <dependency>
                        <groupId>org.example</groupId>
                        <artifactId>lib</artifactId>
                        <version>${lib.version}</version>
                    </dependency>
                </dependencies>
            </project>
        """)
        view = synthesize_effective_view(leaf, [parent])
        assert [(d.artifact_id, d.version) for d in view.dependencies] == [("lib", "3.1"), ("shared", "1.1")]
        assert view.coordinate == Coordinate("com.example", "app", "1.0.0")


class TestRenderedEffectivePom:
    LEAF = """\
        <project>
            <groupId>com.example</groupId>
            <artifactId>app</artifactId>
            <dependencies>
                <dependency>
                    <groupId>org.slf4j</groupId>
                    <artifactId>slf4j-api</artifactId>
                </dependency>
            </dependencies>
        </project>
    """

    def test_rendered_version_used_as_fallback(self):
        rendered = textwrap.dedent("""\
            <project xmlns="http://maven.apache.org/POM/4.0.0">
                <groupId>com.example</groupId>
                <artifactId>app</artifactId>
                <dependencies>
                    <dependency>
                        <groupId>org.slf4j</groupId>
                        <artifactId>slf4j-api</artifactId>
                        <version>2.0.7</version>
                    </dependency>
                </dependencies>
            </project>
        """)
        view = synthesize_effective_view(pom(self.LEAF), effective_pom=rendered)
        assert view.dependencies[0].version == "2.0.7"

    def test_malformed_rendered_output_ignored(self):
        view = synthesize_effective_view(pom(self.LEAF), effective_pom="[INFO] BUILD FAILURE")
        assert view.dependencies[0].version == ""


class TestDescriptorCatalog:
    def test_exact_match_preferred(self, catalog):
        node = catalog.lookup(Coordinate("org.springframework.boot", "spring-boot-dependencies", "3.0.0"))
        assert node.artifact_id == "spring-boot-dependencies"

    def test_other_version_not_matched(self, catalog):
        assert catalog.lookup(Coordinate("org.springframework.boot", "spring-boot-dependencies", "2.7.0")) is None

    def test_versionless_lookup(self, catalog):
        assert catalog.lookup(Coordinate("org.springframework.boot", "spring-boot-dependencies")) is not None

    def test_fallback_consulted(self):
        seen = []
        catalog = DescriptorCatalog(fallback=lambda c: seen.append(c))
        catalog.lookup(Coordinate("g", "a", "1"))
        assert seen == [Coordinate("g", "a", "1")]
