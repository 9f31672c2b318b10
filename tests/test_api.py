import sqlite3
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from petadex.core.database import Database
from petadex.core.settings import Settings, StorageSettings
from petadex.interfaces.api import create_app


@pytest.fixture()
def client(database: Database) -> Iterator[TestClient]:
    settings = Settings(storage=StorageSettings(pdb_base_url="https://example.org/pdb"))
    app = create_app(database=database, settings=settings)
    with TestClient(app) as test_client:
        yield test_client


def test_health(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_list_enzymes_pagination_payload(client: TestClient) -> None:
    response = client.get("/api/enzymes", params={"limit": 3, "offset": 1})

    assert response.status_code == 200
    payload = response.json()
    assert [row["enzyme_id"] for row in payload["data"]] == [2, 3, 4]
    assert payload["pagination"] == {"limit": 3, "offset": 1, "total": 7, "hasMore": True}


def test_list_enzymes_clamps_limit(client: TestClient) -> None:
    payload = client.get("/api/enzymes", params={"limit": 5000}).json()

    assert payload["pagination"]["limit"] == 1000


def test_list_enzymes_filters(client: TestClient) -> None:
    payload = client.get("/api/enzymes", params={"has_component": "false"}).json()

    assert [row["enzyme_id"] for row in payload["data"]] == [5, 6]


def test_list_enzymes_bad_offset_is_400(client: TestClient) -> None:
    response = client.get("/api/enzymes", params={"offset": -1})

    assert response.status_code == 400
    assert "offset" in response.json()["error"]


MALFORMED_INTEGERS = ["--5", "²", str(2**70)]


@pytest.mark.parametrize("value", MALFORMED_INTEGERS)
@pytest.mark.parametrize("param", ["offset", "limit", "family", "component"])
def test_list_enzymes_malformed_integer_is_400(client: TestClient, param: str, value: str) -> None:
    response = client.get("/api/enzymes", params={param: value})

    assert response.status_code == 400
    assert response.json()["error"].startswith(param)


@pytest.mark.parametrize("value", ["²", str(2**70)])
def test_enzyme_by_malformed_id_is_400(client: TestClient, value: str) -> None:
    assert client.get(f"/api/enzymes/{value}").status_code == 400
    assert client.get(f"/api/enzymes/{value}/variants").status_code == 400


@pytest.mark.parametrize("value", MALFORMED_INTEGERS)
def test_member_routes_malformed_id_is_400(client: TestClient, value: str) -> None:
    assert client.get(f"/api/enzymes/family/{value}").status_code == 400
    assert client.get(f"/api/enzymes/component/{value}").status_code == 400


def test_get_enzyme_routes(client: TestClient) -> None:
    by_id = client.get("/api/enzymes/1")
    by_accession = client.get("/api/enzymes/accession/ACC001")

    assert by_id.status_code == 200
    assert by_id.json() == by_accession.json()
    assert by_id.json()["is_centroid"] is True
    assert by_id.json()["family_percent_identity"] is None


def test_get_enzyme_not_found(client: TestClient) -> None:
    response = client.get("/api/enzymes/404")

    assert response.status_code == 404
    assert response.json() == {"error": "Enzyme not found"}


def test_variants_empty_is_200(client: TestClient) -> None:
    response = client.get("/api/enzymes/6/variants")

    assert response.status_code == 200
    assert response.json() == []


def test_variants_order(client: TestClient) -> None:
    rows = client.get("/api/enzymes/1/variants").json()

    assert [row["enzyme_percent_identity"] for row in rows] == [None, 90.0, 75.0]


def test_family_and_component_routes(client: TestClient) -> None:
    family = client.get("/api/enzymes/family/10")
    component = client.get("/api/enzymes/component/100")
    missing = client.get("/api/enzymes/family/999")
    invalid = client.get("/api/enzymes/family/abc")

    assert [row["enzyme_id"] for row in family.json()] == [1, 2, 3]
    assert len(component.json()) == 5
    assert missing.status_code == 404
    assert invalid.status_code == 400


def test_overview_stats(client: TestClient) -> None:
    assert client.get("/api/enzymes/stats/overview").json() == {
        "total_enzymes": 7,
        "total_families": 3,
        "total_components": 1,
        "total_variants": 4,
    }


def test_centroid_audit(client: TestClient) -> None:
    assert client.get("/api/enzymes/stats/centroids").json() == {"violations": [], "count": 0}


def test_plate_average(client: TestClient) -> None:
    rows = client.get("/api/plate-data/gene/PET001/average").json()

    assert [row["plate"] for row in rows] == ["P0", "P1", "P2"]
    assert rows[1]["average_readout"] == pytest.approx(15.0)
    assert rows[1]["sample_count"] == 2


def test_plate_routes_not_found(client: TestClient) -> None:
    assert client.get("/api/plate-data/gene/PET002/average").status_code == 404
    assert client.get("/api/plate-data/gene/UNKNOWN").status_code == 404
    assert client.get("/api/plate-data/activity/gene/UNKNOWN").status_code == 404
    assert client.get("/api/plate-data/experiment/E404").status_code == 404


def test_plate_records_and_activity(client: TestClient) -> None:
    records = client.get("/api/plate-data/gene/PET002").json()
    experiment = client.get("/api/plate-data/experiment/E1").json()

    assert records[0]["readout_value"] is None
    assert len(experiment) == 5


def test_sequence_routes(client: TestClient) -> None:
    assert len(client.get("/api/fastaa").json()) == 2
    assert client.get("/api/fastaa/ACC001").json()["source"] == "IsPETase"
    assert client.get("/api/fastaa/ACC001").json()["in_sra_metadata"] is True

    features = client.get("/api/aa-seq-features/ACC001").json()
    assert features["summary"] == {
        "totalMass": "450.00",
        "avgPI": "6.50",
        "percentHydrophobic": "66.7",
        "sequenceLength": 3,
    }


def test_pdb_routes(client: TestClient) -> None:
    latest = client.get("/api/pdb/accession/ACC001").json()

    assert latest["pdb_id"] == "PDB_B"
    assert latest["pdb_url"] == "https://example.org/pdb/PDB_B.pdb"
    assert client.get("/api/pdb/PDB_Z").status_code == 404


def test_storage_failure_is_500(catalog_path) -> None:
    conn = sqlite3.connect(catalog_path)
    conn.execute("DROP TABLE variant_dictionary")
    conn.commit()
    conn.close()

    with Database(catalog_path) as db:
        app = create_app(database=db, settings=Settings())
        with TestClient(app, raise_server_exceptions=False) as test_client:
            response = test_client.get("/api/enzymes/1/variants")

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}


def test_features_with_null_entries(client: TestClient) -> None:
    response = client.get("/api/aa-seq-features/ACC009")

    assert response.status_code == 200
    payload = response.json()
    assert payload["mass"] == [100.0, None]
    assert payload["summary"]["totalMass"] == "100.00"
    assert payload["summary"]["percentHydrophobic"] == "50.0"
