"""Known-version lookup for coordinates.

The updater only needs one question answered: *which versions of this
artifact exist?* :class:`VersionCatalog` is that interface.
:class:`MavenRepositoryCatalog` answers it from the ``maven-metadata.xml``
document every Maven repository keeps per artifact::

    <metadata>
      <versioning>
        <versions>
          <version>1.0</version>
          <version>1.1</version>
        </versions>
      </versioning>
    </metadata>

Several repositories can be configured; their version lists are merged in
first-seen order. A repository that does not know the artifact (404)
contributes nothing. Any other failure aborts the run with
:class:`~pomkeeper.exceptions.CatalogError`.

Results are cached per ``groupId:artifactId`` for the lifetime of the
catalog, so a coordinate that appears in several sites is fetched once.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Dict, List, Optional, Protocol, Sequence

from pomkeeper.constants import MAVEN_CENTRAL_URL, MAVEN_METADATA_PATH
from pomkeeper.exceptions import CatalogError, NetworkError, RepositoryError
from pomkeeper.models.coordinate import Coordinate
from pomkeeper.utils.http import HTTPClient
from pomkeeper.utils.logger import get_logger

logger = get_logger("catalog")

__all__ = ["VersionCatalog", "MavenRepositoryCatalog", "parse_metadata_versions"]


class VersionCatalog(Protocol):
    """Anything that can list the known versions of a coordinate."""

    def get_known_versions(self, coordinate: Coordinate) -> List[str]:
        """Return every known version string.

        Raises:
            CatalogError: The versions could not be retrieved.
        """
        ...


def parse_metadata_versions(document: str) -> List[str]:
    """Extract ``versioning/versions/version`` values from ``maven-metadata.xml``.

    Raises:
        ET.ParseError: ``document`` is not XML.
    """
    root = ET.fromstring(document.encode("utf-8"))
    versions: List[str] = []
    for element in root.findall("versioning/versions/version"):
        if element.text and element.text.strip():
            versions.append(element.text.strip())
    return versions


class MavenRepositoryCatalog:
    """:class:`VersionCatalog` backed by remote Maven repositories.

    Args:
        http_client: Client used for every request (owns the connection pool).
        repositories: Repository base URLs, searched in order.

    Example::

        with HTTPClient() as http:
            catalog = MavenRepositoryCatalog(http)
            catalog.get_known_versions(Coordinate("junit", "junit"))
    """

    def __init__(
        self,
        http_client: HTTPClient,
        repositories: Optional[Sequence[str]] = None,
    ) -> None:
        self.http_client = http_client
        self.repositories: List[str] = [
            url.rstrip("/") for url in (repositories or [MAVEN_CENTRAL_URL])
        ]
        self._cache: Dict[str, List[str]] = {}

    def get_known_versions(self, coordinate: Coordinate) -> List[str]:
        key = coordinate.key
        if key in self._cache:
            return list(self._cache[key])

        merged: List[str] = []
        seen = set()
        for repository in self.repositories:
            for version in self._fetch(repository, coordinate):
                if version not in seen:
                    seen.add(version)
                    merged.append(version)

        logger.debug("%s: %d known version(s)", key, len(merged))
        self._cache[key] = merged
        return list(merged)

    def metadata_url(self, repository: str, coordinate: Coordinate) -> str:
        path = MAVEN_METADATA_PATH.format(
            group_path=coordinate.group_id.replace(".", "/"),
            artifact_id=coordinate.artifact_id,
        )
        return f"{repository}/{path}"

    def _fetch(self, repository: str, coordinate: Coordinate) -> List[str]:
        url = self.metadata_url(repository, coordinate)
        logger.debug("Looking up %s in %s", coordinate.key, repository)

        try:
            document = self.http_client.get_text(url)
        except RepositoryError as exc:
            if exc.status_code == 404:
                logger.debug("%s not present in %s", coordinate.key, repository)
                return []
            raise CatalogError(
                f"Repository {repository} failed for {coordinate.key}: {exc.message}",
                coordinate=coordinate.key,
            ) from exc
        except NetworkError as exc:
            raise CatalogError(
                f"Cannot retrieve versions of {coordinate.key}: {exc.message}",
                coordinate=coordinate.key,
            ) from exc

        try:
            return parse_metadata_versions(document)
        except ET.ParseError as exc:
            raise CatalogError(
                f"Invalid maven-metadata.xml at {url}: {exc}",
                coordinate=coordinate.key,
            ) from exc
