from __future__ import annotations

import io
import logging
from pathlib import Path

import pytest

from pomkeeper.core.pom_reader import PomReader
from pomkeeper.exceptions import FileOperationError, ManifestParseError
from pomkeeper.models.coordinate import Coordinate, PropertyDecl
from pomkeeper.utils.logger import disable_logging, setup_logging

APP_POM = """<?xml version="1.0" encoding="UTF-8"?>
<project xmlns="http://maven.apache.org/POM/4.0.0"
         xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance">
  <modelVersion>4.0.0</modelVersion>
  <parent>
    <groupId>org.example</groupId>
    <artifactId>parent</artifactId>
    <version>7</version>
  </parent>
  <artifactId>app</artifactId>
  <packaging>pom</packaging>
  <properties>
    <junit.version>4.12</junit.version>
  </properties>
  <modules>
    <module>core</module>
    <module>missing</module>
  </modules>
  <dependencyManagement>
    <dependencies>
      <dependency>
        <groupId>${project.groupId}</groupId>
        <artifactId>core</artifactId>
        <version>${project.version}</version>
      </dependency>
    </dependencies>
  </dependencyManagement>
  <dependencies>
    <dependency>
      <groupId>junit</groupId>
      <artifactId>junit</artifactId>
      <version>${junit.version}</version>
      <scope>test</scope>
    </dependency>
    <dependency>
      <groupId>org.slf4j</groupId>
      <artifactId>slf4j-api</artifactId>
    </dependency>
  </dependencies>
  <profiles>
    <profile>
      <id>legacy</id>
      <properties>
        <junit.version>3.8.1</junit.version>
      </properties>
      <dependencies>
        <dependency>
          <groupId>junit</groupId>
          <artifactId>junit</artifactId>
          <version>${junit.version}</version>
          <classifier>tests</classifier>
        </dependency>
      </dependencies>
    </profile>
  </profiles>
</project>
"""

CORE_POM = """<project>
  <parent>
    <groupId>org.example</groupId>
    <artifactId>app</artifactId>
    <version>7</version>
  </parent>
  <artifactId>core</artifactId>
  <modules>
    <module>../core</module>
    <module>sub/pom.xml</module>
  </modules>
</project>
"""

SUB_POM = """<project>
  <groupId>org.example.sub</groupId>
  <artifactId>sub</artifactId>
  <version>1</version>
</project>
"""


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """A reactor of app -> core -> sub, plus a module that does not exist."""
    (tmp_path / "pom.xml").write_text(APP_POM, encoding="utf-8")
    (tmp_path / "core" / "sub").mkdir(parents=True)
    (tmp_path / "core" / "pom.xml").write_text(CORE_POM, encoding="utf-8")
    (tmp_path / "core" / "sub" / "pom.xml").write_text(SUB_POM, encoding="utf-8")
    return tmp_path


@pytest.mark.unit
class TestReadText:
    """Tests for PomReader.read_text()."""

    def test_identity_inherits_from_parent(self) -> None:
        model = PomReader().read_text(APP_POM)

        assert model.coordinate == Coordinate("org.example", "app", type="pom")
        assert model.version == "7"
        assert model.parent is not None
        assert model.parent.coordinate.key == "org.example:parent"
        assert model.parent.version == "7"

    def test_properties_include_profiles(self) -> None:
        model = PomReader().read_text(APP_POM)

        assert model.properties == [
            PropertyDecl("junit.version", "4.12"),
            PropertyDecl("junit.version", "3.8.1", "legacy"),
        ]

    def test_dependencies_are_interpolated(self) -> None:
        model = PomReader().read_text(APP_POM)

        junit, slf4j, legacy_junit = model.dependencies
        assert junit.raw_version == "${junit.version}"
        assert junit.version == "4.12"
        assert junit.property_reference == "junit.version"
        assert slf4j.version is None
        assert legacy_junit.profile_id == "legacy"
        assert legacy_junit.version == "3.8.1"
        assert legacy_junit.coordinate.classifier == "tests"

    def test_managed_dependencies(self) -> None:
        model = PomReader().read_text(APP_POM)

        (managed,) = model.dependency_management
        assert managed.managed is True
        assert managed.coordinate.key == "org.example:core"
        assert managed.version == "7"

    def test_modules_without_path_are_not_followed(self) -> None:
        model = PomReader().read_text(APP_POM)

        assert model.modules == ["core", "missing"]
        assert model.reactor == frozenset({"org.example:app"})

    def test_missing_identity(self) -> None:
        with pytest.raises(ManifestParseError, match="groupId or artifactId"):
            PomReader().read_text("<project><artifactId>x</artifactId></project>")

    def test_incomplete_parent_is_ignored(self) -> None:
        text = (
            "<project><parent><groupId>g</groupId></parent>"
            "<groupId>g</groupId><artifactId>a</artifactId></project>"
        )

        assert PomReader().read_text(text).parent is None

    def test_wrong_root(self) -> None:
        with pytest.raises(ManifestParseError, match="expected <project>"):
            PomReader().read_text("<settings/>")

    def test_malformed_xml(self) -> None:
        with pytest.raises(ManifestParseError) as exc_info:
            PomReader().read_text("<project>\n<groupId>g</project>")

        assert exc_info.value.line_number == 2


@pytest.mark.unit
class TestRead:
    """Tests for PomReader.read() and reactor discovery."""

    def test_reactor_follows_modules(self, project_dir: Path) -> None:
        """Test nested modules join the reactor and missing ones are reported."""
        stream = io.StringIO()
        setup_logging(level=logging.WARNING, stream=stream)
        try:
            model = PomReader().read(project_dir / "pom.xml")
        finally:
            disable_logging()

        assert model.reactor == frozenset(
            {"org.example:app", "org.example:core", "org.example.sub:sub"}
        )
        assert "Module POM not found" in stream.getvalue()

    def test_directory_argument(self, project_dir: Path) -> None:
        model = PomReader().read(project_dir)

        assert model.coordinate.key == "org.example:app"

    def test_read_modules_disabled(self, project_dir: Path) -> None:
        model = PomReader(read_modules=False).read(project_dir)

        assert model.reactor == frozenset({"org.example:app"})

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileOperationError):
            PomReader().read(tmp_path / "pom.xml")

    def test_broken_module_aborts(self, project_dir: Path) -> None:
        (project_dir / "core" / "sub" / "pom.xml").write_text("<project>", encoding="utf-8")

        with pytest.raises(ManifestParseError):
            PomReader().read(project_dir)
