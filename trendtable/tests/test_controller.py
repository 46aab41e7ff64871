import io
import json

import pytest

from trendtable.controller import app
from trendtable.tests.conftest import SCENARIO_DIR, make_shape_data

SCENARIO = SCENARIO_DIR / "scenario_1_monthly_top2box"


@pytest.fixture
def client():
    app.config["TESTING"] = True
    with app.test_client() as client:
        yield client


def _post_files(client, config, data):
    return client.post(
        "/get-trend-table",
        data={
            "configfile": (io.BytesIO(config), "config.yaml"),
            "datafile": (io.BytesIO(data), "data.json"),
        },
        content_type="multipart/form-data",
    )


class TestGetTrendTable:
    def test_scenario(self, client):
        response = _post_files(client, (SCENARIO / "config.yaml").read_bytes(), (SCENARIO / "data.json").read_bytes())
        assert response.status_code == 200
        body = response.get_json()
        assert body["plotStyle"] == "heatmap_table"
        assert body["headers"] == ["Field", "Jan - 2024", "Feb - 2024", "Mar - 2024"]
        assert body["rows"][2]["cells"][1]["value"] is None
        assert [headline["field"] for headline in body["headlines"]] == [
            "Hospital D", "Hospital B", "Hospital D", "Hospital B"
        ]

    def test_missing_file(self, client):
        response = client.post("/get-trend-table", data={"configfile": (io.BytesIO(b"setup: {}"), "config.yaml")},
                               content_type="multipart/form-data")
        assert response.status_code == 400

    def test_invalid_yaml(self, client):
        response = _post_files(client, b"setup:\n  title: [unclosed\n", json.dumps(make_shape_data({})).encode())
        assert response.status_code == 400
        assert "incorrect yaml" in response.get_json()["description"]

    def test_invalid_json(self, client):
        response = _post_files(client, b"setup: {}\n", b"{not json")
        assert response.status_code == 400

    def test_configuration_that_is_not_a_mapping(self, client):
        response = _post_files(client, b"- a\n- b\n", json.dumps(make_shape_data({})).encode())
        assert response.status_code == 400
        assert response.get_json()["description"] == \
            "Invalid configuration provided: The configuration must be a mapping"

    def test_invalid_configuration(self, client):
        response = _post_files(client, b"setup:\n  mode: rolling\n", json.dumps(make_shape_data({})).encode())
        assert response.status_code == 400
        assert response.get_json()["description"].startswith("Invalid configuration provided")

    def test_invalid_period_unit(self, client):
        response = _post_files(client, b"setup: {}\n", json.dumps(make_shape_data({}, unit="week")).encode())
        assert response.status_code == 400
        assert "week" in response.get_json()["description"]

    def test_unknown_canonical_group(self, client):
        shape_data = json.dumps(make_shape_data({"A": [("2024-01-01", "1")]})).encode()
        response = _post_files(client, b"setup:\n  canonical_group: Z\n", shape_data)
        assert response.status_code == 400
        assert "canonical_group 'Z'" in response.get_json()["description"]


class TestHeatmapDataConfiguration:
    def test_configuration(self, client):
        response = client.post("/heatmap-data-configuration",
                               json={"metric": "top2Box", "dimension": {"name": "Hospital", "fieldId": "hospital"},
                                     "groupBy": "quarter"})
        assert response.status_code == 200
        body = response.get_json()
        assert body["isComplete"] is True
        assert body["axes"][1]["dimensions"][0]["groupBy"] == ["quarter"]

    def test_defaults_to_month(self, client):
        response = client.post("/heatmap-data-configuration", json={"metric": "count"})
        assert response.get_json()["axes"][1]["dimensions"][0]["groupBy"] == ["month"]

    def test_missing_metric(self, client):
        assert client.post("/heatmap-data-configuration", json={}).status_code == 400

    def test_unknown_metric(self, client):
        response = client.post("/heatmap-data-configuration", json={"metric": "median"})
        assert response.status_code == 400
        assert response.get_json()["description"].startswith("Unsupported metric")
