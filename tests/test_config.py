from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from pomkeeper.config import (
    PomKeeperConfig,
    discover_config_file,
    load_config,
    _parse_section,
    _pyproject_has_pomkeeper_section,
    _read_toml,
)
from pomkeeper.constants import DEFAULT_TIMEOUT, MAVEN_CENTRAL_URL
from pomkeeper.exceptions import ConfigError


@pytest.mark.unit
class TestPomKeeperConfig:
    """Tests for PomKeeperConfig dataclass."""

    def test_default_initialization(self) -> None:
        """Test PomKeeperConfig initializes with the documented defaults."""
        config = PomKeeperConfig()

        assert config.repositories == [MAVEN_CENTRAL_URL]
        assert config.allow_snapshots is False
        assert config.allow_major_updates is True
        assert config.exclude_reactor is True
        assert config.process_parent is False
        assert config.process_properties is False
        assert config.auto_link_items is True
        assert config.property_links == {}
        assert config.timeout == DEFAULT_TIMEOUT
        assert config.source_path is None

    def test_defaults_are_not_shared(self) -> None:
        first = PomKeeperConfig()
        first.repositories.append("https://mirror.example/maven2")

        assert PomKeeperConfig().repositories == [MAVEN_CENTRAL_URL]

    def test_to_log_dict(self) -> None:
        """Test to_log_dict returns every option without metadata."""
        config = PomKeeperConfig(
            excludes=["org.example"],
            property_links={"a.version": ["g:a"]},
            source_path=Path("/test/path.toml"),
        )

        result = config.to_log_dict()

        assert result["excludes"] == ["org.example"]
        assert result["property_links"] == {"a.version": ["g:a"]}
        assert result["timeout"] == DEFAULT_TIMEOUT
        assert result["allow_snapshots"] is False
        assert "source_path" not in result


@pytest.mark.unit
class TestDiscoverConfigFile:
    """Tests for discover_config_file function."""

    def test_explicit_path_priority(self, tmp_path: Path) -> None:
        """Test explicit path is used when provided and exists."""
        config_file = tmp_path / "custom.toml"
        config_file.write_text("[pomkeeper]\n", encoding="utf-8")
        (tmp_path / "pomkeeper.toml").write_text("[pomkeeper]\n", encoding="utf-8")

        with patch("pomkeeper.config.Path.cwd", return_value=tmp_path):
            result = discover_config_file(config_file)

        assert result == config_file.resolve()

    def test_explicit_path_not_found_raises_error(self, tmp_path: Path) -> None:
        non_existent = tmp_path / "nonexistent.toml"

        with pytest.raises(ConfigError) as exc_info:
            discover_config_file(non_existent)

        assert "not found" in str(exc_info.value).lower()

    def test_discovers_pomkeeper_toml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "pomkeeper.toml"
        config_file.write_text("[pomkeeper]\n", encoding="utf-8")

        with patch("pomkeeper.config.Path.cwd", return_value=tmp_path):
            result = discover_config_file()

        assert result == config_file

    def test_discovers_pyproject_toml_with_section(self, tmp_path: Path) -> None:
        """Test discovers pyproject.toml with [tool.pomkeeper] section."""
        config_file = tmp_path / "pyproject.toml"
        config_file.write_text(
            "[tool.pomkeeper]\nprocess_parent = true\n",
            encoding="utf-8",
        )

        with patch("pomkeeper.config.Path.cwd", return_value=tmp_path):
            result = discover_config_file()

        assert result == config_file

    def test_ignores_pyproject_toml_without_section(self, tmp_path: Path) -> None:
        config_file = tmp_path / "pyproject.toml"
        config_file.write_text("[tool.other]\nkey = 'value'\n", encoding="utf-8")

        with patch("pomkeeper.config.Path.cwd", return_value=tmp_path):
            result = discover_config_file()

        assert result is None

    def test_returns_none_when_no_config_found(self, tmp_path: Path) -> None:
        with patch("pomkeeper.config.Path.cwd", return_value=tmp_path):
            result = discover_config_file()

        assert result is None

    def test_precedence_order(self, tmp_path: Path) -> None:
        """Test discovery precedence: pomkeeper.toml before pyproject.toml."""
        pomkeeper_toml = tmp_path / "pomkeeper.toml"
        pomkeeper_toml.write_text("[pomkeeper]\n", encoding="utf-8")
        (tmp_path / "pyproject.toml").write_text("[tool.pomkeeper]\n", encoding="utf-8")

        with patch("pomkeeper.config.Path.cwd", return_value=tmp_path):
            result = discover_config_file()

        assert result == pomkeeper_toml


@pytest.mark.unit
class TestPyprojectSection:
    def test_invalid_pyproject_is_treated_as_missing(self, tmp_path: Path) -> None:
        """Test a broken pyproject.toml does not stop discovery."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("[tool.pomkeeper\n", encoding="utf-8")

        assert _pyproject_has_pomkeeper_section(pyproject) is False

    def test_section_present(self, tmp_path: Path) -> None:
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("[tool.pomkeeper]\n", encoding="utf-8")

        assert _pyproject_has_pomkeeper_section(pyproject) is True


@pytest.mark.unit
class TestLoadConfig:
    """Tests for load_config function."""

    def test_defaults_without_file(self, tmp_path: Path) -> None:
        with patch("pomkeeper.config.Path.cwd", return_value=tmp_path):
            config = load_config()

        assert config == PomKeeperConfig()

    def test_loads_pomkeeper_toml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "pomkeeper.toml"
        config_file.write_text(
            "[pomkeeper]\n"
            'repositories = ["https://repo.example/maven2", "https://mirror.example/m2"]\n'
            "allow_major_updates = false\n"
            'excludes = ["org.springframework:*"]\n'
            "process_properties = true\n"
            "timeout = 5\n"
            "\n"
            "[pomkeeper.property_links]\n"
            '"jackson.version" = ["com.fasterxml.jackson.core:jackson-databind"]\n',
            encoding="utf-8",
        )

        config = load_config(config_file)

        assert config.repositories == [
            "https://repo.example/maven2",
            "https://mirror.example/m2",
        ]
        assert config.allow_major_updates is False
        assert config.excludes == ["org.springframework:*"]
        assert config.process_properties is True
        assert config.timeout == 5
        assert config.property_links == {
            "jackson.version": ["com.fasterxml.jackson.core:jackson-databind"]
        }
        assert config.source_path == config_file.resolve()

    def test_loads_pyproject_section(self, tmp_path: Path) -> None:
        config_file = tmp_path / "pyproject.toml"
        config_file.write_text(
            "[project]\nname = 'x'\n\n[tool.pomkeeper]\nprocess_parent = true\n",
            encoding="utf-8",
        )

        config = load_config(config_file)

        assert config.process_parent is True

    def test_empty_section_uses_defaults(self, tmp_path: Path) -> None:
        config_file = tmp_path / "pomkeeper.toml"
        config_file.write_text("# nothing here\n", encoding="utf-8")

        config = load_config(config_file)

        assert config.source_path == config_file.resolve()
        assert config.process_parent is False

    def test_invalid_toml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "pomkeeper.toml"
        config_file.write_text("[pomkeeper\n", encoding="utf-8")

        with pytest.raises(ConfigError, match="Invalid TOML"):
            load_config(config_file)

    def test_malformed_property_link(self, tmp_path: Path) -> None:
        """Test a link without an artifactId is rejected when loading."""
        config_file = tmp_path / "pomkeeper.toml"
        config_file.write_text(
            '[pomkeeper.property_links]\n"x.version" = ["justgroup"]\n',
            encoding="utf-8",
        )

        with pytest.raises(ConfigError, match="Expected groupId:artifactId") as exc_info:
            load_config(config_file)

        assert exc_info.value.option == "property_links.x.version"


@pytest.mark.unit
class TestReadToml:
    def test_reads_tables(self, tmp_path: Path) -> None:
        config_file = tmp_path / "x.toml"
        config_file.write_text("[a]\nb = 1\n", encoding="utf-8")

        assert _read_toml(config_file) == {"a": {"b": 1}}

    def test_unreadable_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Cannot read"):
            _read_toml(tmp_path)


@pytest.mark.unit
class TestParseSection:
    """Tests for _parse_section validation."""

    def test_unknown_keys(self) -> None:
        with pytest.raises(ConfigError, match="Unknown configuration keys: bogus, other"):
            _parse_section({"bogus": 1, "other": 2}, config_path="x.toml")

    @pytest.mark.parametrize(
        "section, option",
        [
            ({"allow_snapshots": "yes"}, "allow_snapshots"),
            ({"process_parent": 1}, "process_parent"),
            ({"excludes": "junit"}, "excludes"),
            ({"includes": ["ok", 3]}, "includes"),
            ({"repositories": []}, "repositories"),
            ({"property_links": ["a"]}, "property_links"),
            ({"property_links": {"a": "g:a"}}, "property_links.a"),
            ({"property_links": {"x.version": ["justgroup"]}}, "property_links.x.version"),
            ({"property_links": {"x.version": ["g:"]}}, "property_links.x.version"),
            ({"timeout": 0}, "timeout"),
            ({"timeout": True}, "timeout"),
            ({"timeout": "30"}, "timeout"),
        ],
    )
    def test_type_errors_name_the_option(self, section: dict, option: str) -> None:
        """Test each invalid value is rejected with the offending option."""
        with pytest.raises(ConfigError) as exc_info:
            _parse_section(section, config_path="x.toml")

        assert exc_info.value.option == option
        assert exc_info.value.config_path == "x.toml"

    def test_valid_values(self) -> None:
        config = _parse_section(
            {
                "allow_snapshots": True,
                "process_snapshots_only": True,
                "include_properties": ["junit.version"],
            },
            config_path="x.toml",
        )

        assert config.allow_snapshots is True
        assert config.process_snapshots_only is True
        assert config.include_properties == ["junit.version"]
