from __future__ import annotations

from pathlib import Path
from typing import Dict, Generator, List
from unittest.mock import MagicMock, patch

import click
import pytest
from click.testing import CliRunner

from pomkeeper.__version__ import __version__
from pomkeeper.cli import cli, main
from pomkeeper.exceptions import CatalogError, PomKeeperError
from pomkeeper.models.coordinate import Coordinate
from pomkeeper.utils.logger import disable_logging

POM = """<?xml version="1.0" encoding="UTF-8"?>
<project xmlns="http://maven.apache.org/POM/4.0.0">
  <modelVersion>4.0.0</modelVersion>
  <groupId>org.example</groupId>
  <artifactId>app</artifactId>
  <version>1.0</version>
  <properties>
    <slf4j.version>2.0.7</slf4j.version>
  </properties>
  <dependencies>
    <dependency>
      <groupId>junit</groupId>
      <artifactId>junit</artifactId>
      <version>4.12</version>
    </dependency>
    <dependency>
      <groupId>org.slf4j</groupId>
      <artifactId>slf4j-api</artifactId>
      <version>${slf4j.version}</version>
    </dependency>
  </dependencies>
</project>
"""

VERSIONS: Dict[str, List[str]] = {
    "junit:junit": ["4.12", "4.13", "4.13.2"],
    "org.slf4j:slf4j-api": ["2.0.7", "2.0.9"],
}


class FakeCatalog:
    def __init__(self, versions: Dict[str, List[str]]) -> None:
        self.versions = versions
        self.lookups: List[str] = []

    def get_known_versions(self, coordinate: Coordinate) -> List[str]:
        self.lookups.append(coordinate.key)
        return list(self.versions.get(coordinate.key, []))


@pytest.fixture
def pom_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A pom.xml in a fresh working directory with no configuration file."""
    monkeypatch.chdir(tmp_path)
    pom = tmp_path / "pom.xml"
    pom.write_text(POM, encoding="utf-8")
    return pom


@pytest.fixture
def catalog() -> Generator[FakeCatalog, None, None]:
    """Replace repository access with an in-memory catalog."""
    fake = FakeCatalog(VERSIONS)
    with patch("pomkeeper.commands.common.HTTPClient", MagicMock()), patch(
        "pomkeeper.commands.common.MavenRepositoryCatalog", return_value=fake
    ):
        yield fake
    disable_logging()


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.mark.integration
class TestUpdateCommands:
    """End-to-end runs of the update commands against a temporary POM."""

    def test_use_latest_writes_file(
        self, runner: CliRunner, pom_file: Path, catalog: FakeCatalog
    ) -> None:
        result = runner.invoke(cli, ["use-latest-versions", str(pom_file)])

        assert result.exit_code == 0, result.output
        assert "Updated 1 version(s)" in result.output
        assert pom_file.read_text(encoding="utf-8") == POM.replace(
            "<version>4.12</version>", "<version>4.13.2</version>"
        )

    def test_dry_run_leaves_file_alone(
        self, runner: CliRunner, pom_file: Path, catalog: FakeCatalog
    ) -> None:
        result = runner.invoke(cli, ["use-latest-versions", "--dry-run", str(pom_file)])

        assert result.exit_code == 0, result.output
        assert "Dry run mode - no changes written" in result.output
        assert "Version Changes (Dry Run)" in result.output
        assert pom_file.read_text(encoding="utf-8") == POM

    def test_backup(self, runner: CliRunner, pom_file: Path, catalog: FakeCatalog) -> None:
        result = runner.invoke(cli, ["use-latest-versions", "--backup", str(pom_file)])

        assert result.exit_code == 0, result.output
        backups = list(pom_file.parent.glob("pom.*.backup.xml"))
        assert len(backups) == 1
        assert backups[0].read_text(encoding="utf-8") == POM

    def test_directory_argument(
        self, runner: CliRunner, pom_file: Path, catalog: FakeCatalog
    ) -> None:
        result = runner.invoke(cli, ["use-next-versions", str(pom_file.parent)])

        assert result.exit_code == 0, result.output
        assert "<version>4.13</version>" in pom_file.read_text(encoding="utf-8")

    def test_default_pom_in_working_directory(
        self, runner: CliRunner, pom_file: Path, catalog: FakeCatalog
    ) -> None:
        result = runner.invoke(cli, ["use-next-versions", "--dry-run"])

        assert result.exit_code == 0, result.output
        assert "junit:junit" in result.output

    def test_segment_flags(self, runner: CliRunner, pom_file: Path, catalog: FakeCatalog) -> None:
        """Test --no-allow-minor keeps junit 4.12 where it is."""
        result = runner.invoke(cli, ["use-latest-versions", "--no-allow-minor", str(pom_file)])

        assert result.exit_code == 0, result.output
        assert "All versions are up to date!" in result.output
        assert pom_file.read_text(encoding="utf-8") == POM

    def test_exclude_flag(self, runner: CliRunner, pom_file: Path, catalog: FakeCatalog) -> None:
        result = runner.invoke(cli, ["use-latest-versions", "--exclude", "junit", str(pom_file)])

        assert result.exit_code == 0, result.output
        assert "junit:junit" not in catalog.lookups

    def test_update_properties(
        self, runner: CliRunner, pom_file: Path, catalog: FakeCatalog
    ) -> None:
        result = runner.invoke(cli, ["update-properties", str(pom_file)])

        assert result.exit_code == 0, result.output
        text = pom_file.read_text(encoding="utf-8")
        assert "<slf4j.version>2.0.9</slf4j.version>" in text
        assert "<version>4.12</version>" in text

    def test_process_properties_with_use_latest(
        self, runner: CliRunner, pom_file: Path, catalog: FakeCatalog
    ) -> None:
        result = runner.invoke(
            cli, ["use-latest-versions", "--process-properties", str(pom_file)]
        )

        assert result.exit_code == 0, result.output
        assert "Updated 2 version(s)" in result.output

    def test_config_file_is_applied(
        self, runner: CliRunner, pom_file: Path, catalog: FakeCatalog
    ) -> None:
        (pom_file.parent / "pomkeeper.toml").write_text(
            '[pomkeeper]\nexcludes = ["junit"]\n', encoding="utf-8"
        )

        result = runner.invoke(cli, ["use-latest-versions", str(pom_file)])

        assert result.exit_code == 0, result.output
        assert catalog.lookups == ["org.slf4j:slf4j-api"]

    def test_cli_flag_overrides_config(
        self, runner: CliRunner, pom_file: Path, catalog: FakeCatalog
    ) -> None:
        (pom_file.parent / "pomkeeper.toml").write_text(
            "[pomkeeper]\nallow_minor_updates = false\n", encoding="utf-8"
        )

        result = runner.invoke(cli, ["use-latest-versions", "--allow-minor", str(pom_file)])

        assert result.exit_code == 0, result.output
        assert "<version>4.13.2</version>" in pom_file.read_text(encoding="utf-8")

    def test_catalog_error_exits_with_one(
        self, runner: CliRunner, pom_file: Path, catalog: FakeCatalog
    ) -> None:
        def fail(coordinate: Coordinate) -> List[str]:
            raise CatalogError("repository unavailable", coordinate=coordinate.key)

        with patch.object(catalog, "get_known_versions", side_effect=fail):
            result = runner.invoke(cli, ["use-latest-versions", str(pom_file)])

        assert result.exit_code == 1
        assert "repository unavailable" in result.output
        assert pom_file.read_text(encoding="utf-8") == POM

    def test_malformed_pom_exits_with_one(
        self, runner: CliRunner, pom_file: Path, catalog: FakeCatalog
    ) -> None:
        pom_file.write_text("<project>", encoding="utf-8")

        result = runner.invoke(cli, ["use-latest-versions", str(pom_file)])

        assert result.exit_code == 1
        assert "Malformed POM" in result.output


@pytest.mark.unit
class TestGroupOptions:
    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert f"pomkeeper {__version__}" in result.output

    def test_help_lists_commands(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        for name in ("use-latest-versions", "use-next-versions", "update-properties"):
            assert name in result.output

    def test_invalid_config_exits_with_one(
        self, runner: CliRunner, pom_file: Path, catalog: FakeCatalog
    ) -> None:
        config = pom_file.parent / "broken.toml"
        config.write_text("[pomkeeper]\nbogus = true\n", encoding="utf-8")

        result = runner.invoke(
            cli, ["--config", str(config), "use-latest-versions", str(pom_file)]
        )

        assert result.exit_code == 1
        assert "Unknown configuration keys: bogus" in result.output


@pytest.mark.unit
class TestMain:
    """Tests for main() exit codes."""

    def test_success(self) -> None:
        with patch("pomkeeper.cli.cli") as mock_cli:
            assert main() == 0

        mock_cli.assert_called_once_with(standalone_mode=False)

    def test_usage_error(self) -> None:
        with patch("pomkeeper.cli.cli", side_effect=click.UsageError("bad usage")):
            assert main() == 2

    def test_pomkeeper_error(self, capsys: pytest.CaptureFixture) -> None:
        with patch("pomkeeper.cli.cli", side_effect=PomKeeperError("boom")):
            assert main() == 1

        assert "boom" in capsys.readouterr().out

    @pytest.mark.parametrize("exc", [KeyboardInterrupt(), click.Abort()])
    def test_interrupted(self, exc: BaseException) -> None:
        with patch("pomkeeper.cli.cli", side_effect=exc):
            assert main() == 130

    def test_unexpected_error(self) -> None:
        with patch("pomkeeper.cli.cli", side_effect=RuntimeError("kaboom")):
            assert main() == 1
