"""Tests for the HTTP repository client with a mocked requests session."""

from unittest.mock import MagicMock

import pytest
import requests
from fastapi.testclient import TestClient

from specimen_viewer.app import create_viewer_app
from specimen_viewer.config import ViewerSettings
from specimen_viewer.errors import DatasetNotFoundError, DataverseRequestError
from specimen_viewer.services.dataverse_client import DataverseClient


def _response(payload=None, text="", status=200):
    response = MagicMock()
    response.json.return_value = payload
    response.text = text
    response.status_code = status
    if status >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status} error")
    return response


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


class TestDataverseClient:
    """Test URL building and response handling."""

    def test_list_dataset_refs(self, session):
        session.get.return_value = _response(
            {
                "data": [
                    {"type": "dataset", "protocol": "doi", "authority": "10.34810", "identifier": "data100"},
                    {"type": "dataverse", "id": 5},
                ]
            }
        )
        client = DataverseClient("https://repo.test/api/", "cor-iphes", session=session)

        assert client.list_dataset_refs() == [
            {"identifier": "data100", "persistentId": "doi:10.34810/data100"}
        ]
        session.get.assert_called_once_with(
            "https://repo.test/api/dataverses/cor-iphes/contents", timeout=30.0
        )

    def test_fetch_dataset_detail_quotes_id(self, session):
        session.get.return_value = _response({"status": "OK"})
        client = DataverseClient("https://repo.test/api", session=session)

        assert client.fetch_dataset_detail("doi:10.34810/data100") == {"status": "OK"}
        url = session.get.call_args.args[0]
        assert url.endswith("?persistentId=doi%3A10.34810%2Fdata100")

    def test_fetch_text(self, session):
        session.get.return_value = _response(text="newmtl m\n")
        client = DataverseClient("https://repo.test/api", session=session)

        assert client.fetch_text(client.datafile_url(7)) == "newmtl m\n"
        assert client.datafile_url(7) == "https://repo.test/api/access/datafile/7?format=original"

    def test_http_error_wrapped(self, session):
        session.get.return_value = _response(status=500)
        client = DataverseClient("https://repo.test/api", session=session)

        with pytest.raises(DataverseRequestError):
            client.fetch_json("https://repo.test/api/info/version")

    def test_connection_error_wrapped(self, session):
        session.get.side_effect = requests.ConnectionError("down")
        client = DataverseClient("https://repo.test/api", session=session)

        with pytest.raises(DataverseRequestError):
            client.fetch_text("https://repo.test/api/access/datafile/1")

    def test_invalid_json(self, session):
        response = _response()
        response.json.side_effect = ValueError("not json")
        session.get.return_value = response
        client = DataverseClient("https://repo.test/api", session=session)

        with pytest.raises(DataverseRequestError):
            client.fetch_json("https://repo.test/api/datasets/1")

    def test_missing_dataset_is_not_found(self, session):
        session.get.return_value = _response(status=404)
        client = DataverseClient("https://repo.test/api", session=session)

        with pytest.raises(DatasetNotFoundError):
            client.fetch_dataset_detail("doi:10.1/NOPE")


class TestRepositoryStatusMapping:
    """Test how repository responses surface through the API."""

    def test_unknown_dataset_gives_404(self, session):
        session.get.return_value = _response(status=404)
        client = DataverseClient("https://repo.test/api", session=session)
        app = create_viewer_app(ViewerSettings(), source=client)

        response = TestClient(app).get(
            "/api/models", params={"persistentId": "doi:10.1/NOPE"}
        )
        assert response.status_code == 404

    def test_server_error_gives_502(self, session):
        session.get.return_value = _response(status=503)
        client = DataverseClient("https://repo.test/api", session=session)
        app = create_viewer_app(ViewerSettings(), source=client)

        response = TestClient(app).get(
            "/api/models", params={"persistentId": "doi:10.1/DOWN"}
        )
        assert response.status_code == 502
