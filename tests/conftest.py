"""Shared fixtures: a sample dataset payload and an in-memory dataset source."""

import copy

import pytest

from specimen_viewer.errors import DatasetNotFoundError, DataverseRequestError
from specimen_viewer.services.dataset_service import DatasetService

FEMUR_PID = "doi:10.34810/data100"
BROKEN_PID = "doi:10.34810/data200"
API_ROOT = "https://repo.test/api"

SAMPLE_FILES = [
    {"label": "femur.obj", "directoryLabel": "Femur_left", "dataFile": {"id": 101}},
    {"label": "femur.mtl", "directoryLabel": "Femur_left", "dataFile": {"id": 102}},
    {
        "label": "femur_diffuse.jpg",
        "directoryLabel": "Femur_left/textures",
        "dataFile": {"id": 103},
    },
    {"label": "Skull.obj", "directoryLabel": "Skull UBERON_0003129", "dataFile": {"id": 201}},
    {
        "label": "Skull.mtl",
        "directoryLabel": "Skull UBERON_0003129/materials",
        "dataFile": {"id": 202},
    },
    {"label": "README.txt", "dataFile": {"id": 301}},
]

FEMUR_OBJ = "mtllib femur.mtl\nv 0 0 0\nusemtl bone\n"
SKULL_OBJ = "# no material library\nv 0 0 0\n"

FEMUR_MTL = """# exported
newmtl bone
Kd 0.8 0.7 0.6
map_Kd textures/femur_diffuse.jpg
map_Bump -bm 0.5 textures/missing_normal.png

newmtl marrow
Kd 0 0 0
map_Kd textures/femur_diffuse.jpg
"""


def _primitive(type_name, value):
    return {"typeName": type_name, "multiple": False, "typeClass": "primitive", "value": value}


def make_detail(files=None, persistent_url="https://doi.org/10.34810/data100"):
    return {
        "status": "OK",
        "data": {
            "id": 100,
            "protocol": "doi",
            "authority": "10.34810",
            "identifier": "data100",
            "persistentUrl": persistent_url,
            "latestVersion": {
                "files": copy.deepcopy(SAMPLE_FILES if files is None else files),
                "metadataBlocks": {
                    "citation": {
                        "displayName": "Citation Metadata",
                        "name": "citation",
                        "fields": [
                            _primitive("title", "Ursus spelaeus femur"),
                            {
                                "typeName": "author",
                                "multiple": True,
                                "typeClass": "compound",
                                "value": [
                                    {
                                        "authorName": _primitive("authorName", "Doe, Jane"),
                                        "authorAffiliation": _primitive(
                                            "authorAffiliation", "IPHES"
                                        ),
                                    }
                                ],
                            },
                            {
                                "typeName": "subject",
                                "multiple": True,
                                "typeClass": "controlledVocabulary",
                                "value": ["Earth and Environmental Sciences"],
                            },
                        ],
                    },
                    "darwincore": {
                        "displayName": "Darwin Core",
                        "name": "darwincore",
                        "fields": [
                            _primitive("dwcSex", "MALE"),
                            _primitive("dwcLifeStage", "adult"),
                            _primitive("dwcCatalogNumber", " IPHES-1234 "),
                            _primitive("dwcOtherCatalogNumbers", "A-1; B-2, A-1"),
                            _primitive("dwcTaxonID", "2433451"),
                        ],
                    },
                },
            },
        },
    }


class StubSource:
    """In-memory dataset source that records every detail request."""

    def __init__(self, details=None, texts=None, failing=()):
        self.details = details if details is not None else {FEMUR_PID: make_detail()}
        self.texts = (
            texts
            if texts is not None
            else {"101": FEMUR_OBJ, "102": FEMUR_MTL, "201": SKULL_OBJ}
        )
        self.failing = set(failing)
        self.detail_calls = []

    def list_dataset_refs(self):
        pids = list(self.details) + [pid for pid in self.failing if pid not in self.details]
        return [{"identifier": pid.split("/")[-1], "persistentId": pid} for pid in pids]

    def fetch_dataset_detail(self, persistent_id):
        self.detail_calls.append(persistent_id)
        if persistent_id in self.failing:
            raise DataverseRequestError(f"Request failed for {persistent_id}")
        if persistent_id not in self.details:
            raise DatasetNotFoundError(persistent_id)
        return copy.deepcopy(self.details[persistent_id])

    def datafile_url(self, file_id):
        return f"{API_ROOT}/access/datafile/{file_id}?format=original"

    def fetch_text(self, url):
        file_id = url.split("/access/datafile/")[-1].split("?")[0]
        if file_id not in self.texts:
            raise DatasetNotFoundError(file_id)
        return self.texts[file_id]


@pytest.fixture
def sample_detail():
    return make_detail()


@pytest.fixture
def stub_source():
    return StubSource(failing=[BROKEN_PID])


@pytest.fixture
def service(stub_source):
    return DatasetService(stub_source)
