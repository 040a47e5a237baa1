"""Tests for the /airtable-api endpoint."""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def client(api_app):
    return TestClient(api_app)


def _order_payload(**overrides) -> dict:
    payload = {
        "action": "createOrder",
        "clubId": "recClub",
        "clubNom": "RC Lens",
        "total": 45,
        "lignes": [{"productId": "recP1", "taille": "M", "quantite": 1}],
    }
    payload.update(overrides)
    return payload


class TestAirtableGet:
    def test_get_club(self, client, airtable_stub):
        airtable_stub.tables["tblClubs"] = [[{"id": "recC", "fields": {"Nom": "RC Lens", "email": "rc@lens.fr"}}]]

        resp = client.get("/airtable-api", params={"action": "getClub", "email": "RC@lens.fr"})

        assert resp.status_code == 200
        assert resp.json()["club"]["nom"] == "RC Lens"
        assert resp.headers["access-control-allow-methods"] == "GET, POST, OPTIONS"

    def test_get_orders(self, client, airtable_stub):
        airtable_stub.tables["tblCommandes"] = [
            [{"id": "recO", "fields": {"Club": ["recClub"], "Référence": "CMD-RCLENS-000001"}}]
        ]
        resp = client.get("/airtable-api", params={"action": "getOrders", "clubId": "recClub"})
        assert resp.json()["orders"][0]["ref"] == "CMD-RCLENS-000001"

    def test_get_catalogue_uses_service(self, client):
        mock = AsyncMock(return_value={"products": []})
        with patch("app.routers.airtable.vestiaire.get_catalogue", new=mock):
            resp = client.get("/airtable-api", params={"action": "getCatalogue", "clubNom": "RC Lens"})

        assert resp.status_code == 200
        assert resp.json() == {"products": []}
        assert mock.await_args.args[2] == "RC Lens"

    def test_catalogue_with_loose_field_types(self, client, airtable_stub):
        airtable_stub.tables["tblProduits"] = [
            [
                {
                    "id": "recP1",
                    "fields": {
                        "Nom": "Short",
                        "Club": "FCN",
                        "Visible Vestiaire": True,
                        "Tailles disponibles": "S, M, L",
                        "Groupe Stock": 3,
                    },
                }
            ]
        ]

        resp = client.get("/airtable-api", params={"action": "getCatalogue", "clubNom": "FCN"})

        assert resp.status_code == 200
        product = resp.json()["products"][0]
        assert product["tailles"] == ["S", "M", "L"]
        assert product["groupeStock"] == "3"

    def test_missing_parameter_is_bad_request(self, client, airtable_stub):
        resp = client.get("/airtable-api", params={"action": "getDemandes"})

        assert resp.status_code == 400
        assert resp.json() == {"error": "Paramètre manquant: clubId"}
        assert airtable_stub.requests == []

    def test_unknown_action_is_bad_request(self, client):
        resp = client.get("/airtable-api", params={"action": "deleteEverything"})
        assert resp.status_code == 400
        assert resp.json()["error"] == "Action inconnue: deleteEverything"

    def test_upstream_failure_returns_500(self, client, airtable_stub):
        airtable_stub.failures["tblClubs"] = (401, "AUTHENTICATION_REQUIRED")

        resp = client.get("/airtable-api", params={"action": "getClub", "email": "a@b.fr"})

        assert resp.status_code == 500
        assert resp.json() == {
            "error": "Erreur serveur",
            "details": "Airtable error: AUTHENTICATION_REQUIRED",
        }


class TestAirtablePost:
    def test_create_order(self, client, airtable_stub):
        resp = client.post("/airtable-api", json=_order_payload())

        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["orderRef"].startswith("CMD-RCLENS-")
        assert [table for table, _ in airtable_stub.created] == ["tblCommandes", "tblLignes"]

    def test_create_order_without_lines_is_rejected(self, client, airtable_stub):
        resp = client.post("/airtable-api", json=_order_payload(lignes=[]))

        assert resp.status_code == 400
        assert resp.json()["error"] == "Données invalides"
        assert "lignes" in resp.json()["details"]
        assert airtable_stub.requests == []

    def test_create_demande(self, client, airtable_stub):
        resp = client.post(
            "/airtable-api",
            json={"action": "createDemande", "clubId": "recClub", "objet": "Délai", "message": "?"},
        )
        assert resp.status_code == 200
        assert resp.json() == {"success": True}
        assert airtable_stub.created[0][0] == "tblDemandes"

    def test_unknown_post_action(self, client):
        resp = client.post("/airtable-api", json={"action": "dropBase"})
        assert resp.status_code == 400
        assert resp.json()["error"] == "Action POST inconnue: dropBase"

    def test_body_must_be_json(self, client):
        resp = client.post(
            "/airtable-api", content=b"not json", headers={"Content-Type": "application/json"}
        )
        assert resp.status_code == 400

    def test_body_must_be_utf8(self, client, airtable_stub):
        resp = client.post(
            "/airtable-api", content=b'{"action": "\xff"}', headers={"Content-Type": "application/json"}
        )

        assert resp.status_code == 400
        assert resp.json() == {"error": "Corps de requête invalide"}
        assert airtable_stub.requests == []

    def test_line_failure_returns_500(self, client, airtable_stub):
        airtable_stub.failures["tblLignes"] = (422, "INVALID_VALUE_FOR_COLUMN")

        resp = client.post("/airtable-api", json=_order_payload())

        assert resp.status_code == 500
        assert "INVALID_VALUE_FOR_COLUMN" in resp.json()["details"]


class TestAirtablePreflight:
    def test_options_returns_empty_success(self, client, airtable_stub):
        resp = client.options("/airtable-api")

        assert resp.status_code == 200
        assert resp.content == b""
        assert resp.headers["access-control-allow-origin"] == "*"
        assert resp.headers["access-control-allow-methods"] == "GET, POST, OPTIONS"
        assert airtable_stub.requests == []
