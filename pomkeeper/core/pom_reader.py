"""POM reader: raw ``pom.xml`` to :class:`ProjectModel`.

The reader produces the flat, already-normalized view the updater works
on. It understands just enough of Maven's model for that purpose:

* the project and parent coordinates (groupId and version inherited from
  the parent when omitted),
* the property table, including properties declared inside profiles,
* ``dependencies`` and ``dependencyManagement``, top level and per profile,
* ``modules``, read recursively to learn which artifacts the reactor
  builds.

Values are interpolated against the property table and the
``${project.*}`` / ``${pom.*}`` built-ins. Nothing is downloaded: parent
POMs are not merged, and versions inherited from a parent's
``dependencyManagement`` stay unknown.

Typical usage::

    model = PomReader().read(Path("pom.xml"))
    for dep in model.dependencies:
        print(dep.coordinate, dep.version)
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path
from typing import List, Optional, Set, Union

from pomkeeper.constants import POM_FILE_NAME
from pomkeeper.exceptions import ManifestParseError
from pomkeeper.models.coordinate import Coordinate, PropertyDecl
from pomkeeper.models.project import DependencyDecl, ParentDecl, ProjectModel
from pomkeeper.utils.filesystem import safe_read_file
from pomkeeper.utils.logger import get_logger

logger = get_logger("pom_reader")


def _strip_namespace(root: ET.Element) -> None:
    """Drop ``{namespace}`` prefixes so lookups can use bare tag names."""
    for element in root.iter():
        if isinstance(element.tag, str) and "}" in element.tag:
            element.tag = element.tag.split("}", 1)[1]


def _text(element: Optional[ET.Element], tag: str) -> Optional[str]:
    if element is None:
        return None
    child = element.find(tag)
    if child is None or child.text is None:
        return None
    value = child.text.strip()
    return value or None


class PomReader:
    """Reads POM files into :class:`ProjectModel` instances.

    Args:
        read_modules: Follow ``<module>`` entries to build the reactor.
    """

    def __init__(self, *, read_modules: bool = True) -> None:
        self.read_modules = read_modules

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def read(self, path: Union[str, Path]) -> ProjectModel:
        """Read the POM at ``path`` (a file, or a directory holding ``pom.xml``).

        Raises:
            FileOperationError: The file cannot be read.
            ManifestParseError: The file is not a usable POM.
        """
        pom_path = Path(path)
        if pom_path.is_dir():
            pom_path = pom_path / POM_FILE_NAME
        return self.read_text(safe_read_file(pom_path), path=pom_path)

    def read_text(self, text: str, *, path: Optional[Path] = None) -> ProjectModel:
        """Build a model from POM ``text``; modules are resolved relative to ``path``."""
        root = self._parse(text, path)
        model = self._build_model(root, path)

        reactor: Set[str] = {model.coordinate.key}
        if self.read_modules and path is not None:
            visited = {path.resolve()}
            reactor.update(self._collect_reactor(path, model.modules, visited))
        model.reactor = frozenset(reactor)

        logger.debug(
            "Read %s: %d dependencies, %d managed, %d properties, reactor of %d",
            model.coordinate,
            len(model.dependencies),
            len(model.dependency_management),
            len(model.properties),
            len(model.reactor),
        )
        return model

    # ------------------------------------------------------------------
    # Parsing (private)
    # ------------------------------------------------------------------

    @staticmethod
    def _parse(text: str, path: Optional[Path]) -> ET.Element:
        source = str(path) if path else None
        try:
            root = ET.fromstring(text.encode("utf-8"))
        except ET.ParseError as exc:
            raise ManifestParseError(
                f"Malformed POM: {exc}",
                file_path=source,
                line_number=exc.position[0] if exc.position else None,
            ) from exc

        _strip_namespace(root)
        if root.tag != "project":
            raise ManifestParseError(
                f"Root element is <{root.tag}>, expected <project>",
                file_path=source,
            )
        return root

    def _build_model(self, root: ET.Element, path: Optional[Path]) -> ProjectModel:
        parent = self._read_parent(root)

        group_id = _text(root, "groupId") or (parent.coordinate.group_id if parent else None)
        artifact_id = _text(root, "artifactId")
        if not group_id or not artifact_id:
            raise ManifestParseError(
                "POM lacks groupId or artifactId",
                file_path=str(path) if path else None,
            )

        model = ProjectModel(
            coordinate=Coordinate(group_id, artifact_id, type=_text(root, "packaging")),
            version=_text(root, "version") or (parent.version if parent else None),
            parent=parent,
            properties=self._read_properties(root),
            modules=[
                m.text.strip()
                for m in root.findall("modules/module")
                if m.text and m.text.strip()
            ],
        )

        # Coordinates are interpolated, so properties must be known first
        scopes = [(root, None)] + [
            (profile, _text(profile, "id")) for profile in root.findall("profiles/profile")
        ]
        for scope, profile_id in scopes:
            model.dependencies.extend(
                self._read_dependencies(scope, "dependencies/dependency", model, profile_id)
            )
            model.dependency_management.extend(
                self._read_dependencies(
                    scope,
                    "dependencyManagement/dependencies/dependency",
                    model,
                    profile_id,
                    managed=True,
                )
            )
        return model

    @staticmethod
    def _read_parent(root: ET.Element) -> Optional[ParentDecl]:
        element = root.find("parent")
        if element is None:
            return None
        group_id = _text(element, "groupId")
        artifact_id = _text(element, "artifactId")
        version = _text(element, "version")
        if not group_id or not artifact_id or not version:
            logger.warning("Ignoring incomplete <parent> declaration")
            return None
        return ParentDecl(
            coordinate=Coordinate(group_id, artifact_id, type="pom"),
            version=version,
        )

    @staticmethod
    def _read_properties(root: ET.Element) -> List[PropertyDecl]:
        properties: List[PropertyDecl] = []
        for element in root.findall("properties/*"):
            properties.append(PropertyDecl(element.tag, (element.text or "").strip()))
        for profile in root.findall("profiles/profile"):
            profile_id = _text(profile, "id")
            for element in profile.findall("properties/*"):
                properties.append(
                    PropertyDecl(element.tag, (element.text or "").strip(), profile_id)
                )
        return properties

    @staticmethod
    def _read_dependencies(
        scope: ET.Element,
        xpath: str,
        model: ProjectModel,
        profile_id: Optional[str],
        *,
        managed: bool = False,
    ) -> List[DependencyDecl]:
        declarations: List[DependencyDecl] = []
        for element in scope.findall(xpath):
            group_id = model.interpolate(_text(element, "groupId"), profile_id)
            artifact_id = model.interpolate(_text(element, "artifactId"), profile_id)
            if not group_id or not artifact_id:
                logger.debug("Skipping dependency without groupId/artifactId")
                continue

            raw_version = _text(element, "version")
            declarations.append(
                DependencyDecl(
                    coordinate=Coordinate(
                        group_id,
                        artifact_id,
                        classifier=_text(element, "classifier"),
                        type=_text(element, "type"),
                    ),
                    raw_version=raw_version,
                    version=model.interpolate(raw_version, profile_id),
                    managed=managed,
                    profile_id=profile_id,
                )
            )
        return declarations

    # ------------------------------------------------------------------
    # Reactor (private)
    # ------------------------------------------------------------------

    def _collect_reactor(self, path: Path, modules: List[str], visited: Set[Path]) -> Set[str]:
        keys: Set[str] = set()
        for module in modules:
            module_path = path.parent / module
            if module_path.suffix != ".xml":
                module_path = module_path / POM_FILE_NAME
            resolved = module_path.resolve()
            if resolved in visited:
                continue
            visited.add(resolved)

            if not module_path.is_file():
                logger.warning("Module POM not found: %s", module_path)
                continue

            root = self._parse(safe_read_file(module_path), module_path)
            child = self._build_model(root, module_path)
            keys.add(child.coordinate.key)
            keys.update(self._collect_reactor(module_path, child.modules, visited))
        return keys
