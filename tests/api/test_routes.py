"""API route tests using the FastAPI TestClient."""


class TestComponentConfigRoutes:
    """GET /api/ccs/..."""

    def test_assemble_by_query(self, client):
        """component query parameter selects the view block."""
        response = client.get("/api/ccs/person", params={"component": "listView", "lang": "en"})
        assert response.status_code == 200
        data = response.json()
        assert data["component"] == "listView"
        assert set(data["componentSettings"]) == {"table", "toolbar", "filterSection", "meta"}
        assert data["componentSettings"]["toolbar"]["title"] == "People"
        assert "headers" not in data

    def test_assemble_by_path(self, client):
        """The path form returns the same payload as the query form."""
        by_path = client.get("/api/ccs/person/listView", params={"lang": "en"}).json()
        by_query = client.get("/api/ccs/person", params={"component": "listView", "lang": "en"}).json()
        assert by_path == by_query

    def test_component_parameter_required(self, client):
        """Omitting component is a 422."""
        response = client.get("/api/ccs/person")
        assert response.status_code == 422
        assert response.json()["detail"] == {"error": "component parameter is required"}

    def test_component_subset_and_paging(self, client):
        """componentSettings, per_page and page narrow and page the payload."""
        response = client.get(
            "/api/ccs/person/listView",
            params={"componentSettings": "meta", "per_page": 5, "page": 2, "lang": "en"},
        )
        assert response.status_code == 200
        meta = response.json()["componentSettings"]["meta"]
        assert list(response.json()["componentSettings"]) == ["meta"]
        assert meta["pagination"] == {"current_page": 2, "per_page": 5}
        assert meta["datalink"].startswith("/api/gapi/person?columns=")

    def test_columns_override(self, client):
        """columns replaces the view block's column list."""
        response = client.get(
            "/api/ccs/person/listView",
            params={"componentSettings": "table", "columns": "first_name_eng", "lang": "en"},
        )
        headers = response.json()["componentSettings"]["table"]["headers"]
        assert [h["key"] for h in headers] == ["first_name_eng", "custody_badge"]

    def test_unknown_components(self, client):
        """Unknown component keys are listed in a structured 422."""
        response = client.get(
            "/api/ccs/person/listView", params={"componentSettings": "table,chart,grid"}
        )
        assert response.status_code == 422
        assert response.json()["detail"] == {
            "error": "Component config(s) not found",
            "missingComponents": ["chart", "grid"],
        }

    def test_language_not_supported(self, client):
        """Unsupported languages return a message with empty data."""
        response = client.get("/api/ccs/person/statsView", params={"lang": "dv"})
        assert response.status_code == 200
        assert response.json() == {
            "message": "Language 'dv' not supported by view config",
            "data": [],
        }

    def test_default_language(self, client):
        """Without lang the default language (dv) is used."""
        response = client.get("/api/ccs/person/formView")
        assert response.status_code == 200
        form = response.json()["componentSettings"]["form"]
        assert "first_name_div" in [f["key"] for f in form["fields"]]

    def test_unknown_model_and_block(self, client):
        """Unknown view configs and blocks are 422s."""
        assert client.get("/api/ccs/ghost/listView").status_code == 422
        response = client.get("/api/ccs/person/detailView")
        assert response.status_code == 422
        assert "detailView" in response.json()["detail"]["error"]

    def test_invalid_per_page(self, client):
        """per_page must be positive."""
        assert client.get("/api/ccs/person/listView", params={"per_page": 0}).status_code == 422


class TestViewConfigRoutes:
    """GET /api/view-configs/..."""

    def test_list(self, client):
        """Summaries list every view config with its blocks."""
        response = client.get("/api/view-configs")
        assert response.status_code == 200
        assert {"model": "person", "blocks": ["listView", "formView", "statsView"]} in response.json()

    def test_get_document(self, client):
        """The raw document is returned as stored."""
        response = client.get("/api/view-configs/Person")
        assert response.status_code == 200
        assert response.json()["statsView"]["noModel"] is True

    def test_get_missing_document(self, client):
        """Unknown models are 404s."""
        assert client.get("/api/view-configs/ghost").status_code == 404

    def test_validate(self, client):
        """The shipped person config validates cleanly."""
        response = client.get("/api/view-configs/person/validate")
        assert response.status_code == 200
        assert response.json() == {"model": "person", "errors": [], "warnings": []}


class TestComponentRoutes:
    """GET /api/components/..."""

    def test_list(self, client):
        """Every template kind is listed."""
        kinds = {c["kind"] for c in client.get("/api/components").json()}
        assert kinds == {"table", "form", "toolbar", "filterSection", "meta"}

    def test_get_with_suffix(self, client):
        """Numeric suffixes resolve to the base template."""
        response = client.get("/api/components/table2")
        assert response.status_code == 200
        assert response.json()["kind"] == "table"
        assert response.json()["directives"]["headers"] == "on"

    def test_get_unknown(self, client):
        """Unknown kinds are 404s."""
        assert client.get("/api/components/chart").status_code == 404


class TestRootRoutes:
    """Service info and health."""

    def test_root(self, client):
        """Root lists the endpoints."""
        data = client.get("/").json()
        assert data["service"] == "UI API"
        assert data["endpoints"]["view_configs"] == "/api/view-configs"

    def test_health(self, client):
        """Health reports loaded counts."""
        data = client.get("/health").json()
        assert data["status"] == "healthy"
        assert data["components_loaded"] == 5
        assert data["schemas_loaded"] == 2
        assert data["view_configs_loaded"] == 1
