"""HTTP access to a Dataverse installation."""

import logging
from typing import Any, Optional, Union
from urllib.parse import quote

import requests

from ..config import DEFAULT_API_ROOT, DEFAULT_DATAVERSE_ID
from ..errors import DatasetNotFoundError, DataverseRequestError

logger = logging.getLogger(__name__)


class DataverseClient:
    """Thin wrapper over the Dataverse native API used by the viewer."""

    def __init__(
        self,
        api_root: str = DEFAULT_API_ROOT,
        dataverse_id: str = DEFAULT_DATAVERSE_ID,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_root = api_root.rstrip("/")
        self.dataverse_id = dataverse_id
        self.timeout = timeout
        self.session = session or requests.Session()

    def _get(self, url: str) -> requests.Response:
        logger.debug("GET %s", url)
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise DataverseRequestError(f"Request failed for {url}: {e}") from e

        if response.status_code == 404:
            raise DatasetNotFoundError(f"Not found in repository: {url}")
        try:
            response.raise_for_status()
        except requests.HTTPError as e:
            raise DataverseRequestError(f"Request failed for {url}: {e}") from e
        return response

    def fetch_json(self, url: str) -> Any:
        """Fetch and decode a JSON document."""
        response = self._get(url)
        try:
            return response.json()
        except ValueError as e:
            raise DataverseRequestError(f"Invalid JSON returned by {url}") from e

    def fetch_text(self, url: str) -> str:
        return self._get(url).text

    def datafile_url(self, file_id: Union[int, str]) -> str:
        """Download URL for the original bytes of a data file."""
        return f"{self.api_root}/access/datafile/{file_id}?format=original"

    def dataset_url(self, persistent_id: str) -> str:
        return (
            f"{self.api_root}/datasets/:persistentId/"
            f"?persistentId={quote(persistent_id, safe='')}"
        )

    def list_dataset_refs(self) -> list[dict[str, str]]:
        """
        List datasets published in the configured collection.

        Returns:
            ``[{"identifier", "persistentId"}]`` in collection order
        """
        contents = self.fetch_json(
            f"{self.api_root}/dataverses/{self.dataverse_id}/contents"
        )
        items = contents.get("data") if isinstance(contents, dict) else None
        refs = []
        for item in items or []:
            if not isinstance(item, dict) or item.get("type") != "dataset":
                continue
            persistent_id = f"{item.get('protocol')}:{item.get('authority')}/{item.get('identifier')}"
            refs.append({"identifier": item.get("identifier"), "persistentId": persistent_id})
        logger.info("Found %d datasets in %s", len(refs), self.dataverse_id)
        return refs

    def fetch_dataset_detail(self, persistent_id: str) -> dict:
        logger.info("Fetching dataset %s", persistent_id)
        return self.fetch_json(self.dataset_url(persistent_id))
