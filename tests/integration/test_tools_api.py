"""Integration tests for the tool and resource HTTP surface.

Runs the full FastAPI app (lifespan included) with a FakeEngine standing in
for SurrealDB, and checks every response envelope:

  200 success        {tool, query_id, duration_ms, result}
  400 invalid params {"error": {"code": "invalid_parameters", parameter, reason, excerpt}}
                     (also for bodies that are not a JSON object)
  404 unknown tool   {"error": {"code": "unknown_tool"}}
  502 query failed   {"error": {"code": "query_failed", message, query_id}}
"""

from __future__ import annotations

from typing import Any, Callable

import pytest
from starlette.testclient import TestClient

from surrealmcp.config import Config


@pytest.fixture
def client(
    make_client: Callable[..., TestClient], fake_engine: Any, anonymous_config: Config
) -> TestClient:
    return make_client(anonymous_config, fake_engine)


class TestToolCalls:
    def test_select_success(self, client: TestClient, fake_engine: Any) -> None:
        response = client.post(
            "/tools/select",
            json={"targets": ["person"], "where_clause": "age > $min", "parameters": {"min": 18}},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["tool"] == "select"
        assert body["query_id"] == 1
        assert body["result"] == [{"id": "person:tobie", "name": "Tobie"}]
        assert isinstance(body["duration_ms"], float)
        assert fake_engine.calls == [("SELECT * FROM person WHERE age > $min", {"min": 18})]

    def test_injection_rejected_before_engine(self, client: TestClient, fake_engine: Any) -> None:
        response = client.post(
            "/tools/select", json={"targets": ["person"], "where_clause": "id=1; DELETE *"}
        )
        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "invalid_parameters"
        assert error["parameter"] == "where_clause"
        assert error["reason"] == "statement_separator"
        assert error["excerpt"] == "id=1; DELETE *"
        assert fake_engine.calls == []

    @pytest.mark.parametrize(
        ("clause", "value", "reason"),
        [
            ("order_clause", "name -- x", "line_comment"),
            ("group_clause", "a /* x */", "block_comment"),
            ("limit_clause", "'10", "unterminated_string"),
        ],
    )
    def test_each_reason_surfaces(
        self, client: TestClient, clause: str, value: str, reason: str
    ) -> None:
        response = client.post("/tools/select", json={"targets": ["t"], clause: value})
        error = response.json()["error"]
        assert error["parameter"] == clause
        assert error["reason"] == reason

    def test_relate_table_injection(self, client: TestClient, fake_engine: Any) -> None:
        response = client.post(
            "/tools/relate",
            json={"from": "person:a", "table": "likes; REMOVE TABLE person", "to": "post:1"},
        )
        assert response.status_code == 400
        assert response.json()["error"]["parameter"] == "table"
        assert fake_engine.calls == []

    def test_relate_success(self, client: TestClient, fake_engine: Any) -> None:
        response = client.post(
            "/tools/relate",
            json={"from": "person:a", "table": "likes", "to": "post:1", "content": {"w": 1}},
        )
        assert response.status_code == 200
        assert fake_engine.calls[0] == (
            "RELATE person:a->likes->post:1 CONTENT $content",
            {"content": {"w": 1}},
        )

    def test_unknown_argument(self, client: TestClient) -> None:
        response = client.post("/tools/select", json={"targets": ["t"], "filter": "x"})
        assert response.status_code == 400
        assert response.json()["error"]["parameter"] == "filter"

    def test_missing_body(self, client: TestClient) -> None:
        response = client.post("/tools/select")
        assert response.status_code == 400
        assert response.json()["error"]["parameter"] == "targets"

    def test_body_not_an_object(self, client: TestClient, fake_engine: Any) -> None:
        response = client.post("/tools/select", json=["targets", "x" * 200])
        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "invalid_parameters"
        assert error["parameter"] == "arguments"
        assert error["reason"] == "not_an_object"
        assert "x" * 200 not in response.text
        assert fake_engine.calls == []

    def test_malformed_json_body(self, client: TestClient) -> None:
        response = client.post(
            "/tools/select",
            content=b'{"targets": ["person"',
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        error = response.json()["error"]
        assert error["parameter"] == "arguments"
        assert error["reason"] == "invalid_json"

    def test_update_with_empty_order_clause(self, client: TestClient, fake_engine: Any) -> None:
        response = client.post(
            "/tools/update",
            json={"targets": ["person"], "data": {"x": 1}, "order_clause": ""},
        )
        assert response.status_code == 200
        assert fake_engine.calls[0][0] == "UPDATE person MERGE $data"

    def test_unknown_tool(self, client: TestClient) -> None:
        response = client.post("/tools/query", json={"query": "REMOVE DATABASE main"})
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "unknown_tool"

    def test_query_failed(
        self,
        make_client: Callable[..., TestClient],
        engine_factory: Any,
        anonymous_config: Config,
    ) -> None:
        client = make_client(anonymous_config, engine_factory(error="Table 'x' does not exist"))
        response = client.post("/tools/select", json={"targets": ["x"]})
        assert response.status_code == 502
        error = response.json()["error"]
        assert error == {
            "code": "query_failed",
            "message": "Table 'x' does not exist",
            "query_id": 1,
        }

    def test_query_ids_increase_across_requests(self, client: TestClient) -> None:
        first = client.post("/tools/delete", json={"targets": ["a:1"]}).json()
        second = client.post("/tools/delete", json={"targets": ["a:2"]}).json()
        assert second["query_id"] == first["query_id"] + 1


class TestListing:
    def test_list_tools(self, client: TestClient) -> None:
        response = client.get("/tools")
        assert response.status_code == 200
        tools = {tool["name"]: tool for tool in response.json()["tools"]}
        assert set(tools) == {"select", "create", "insert", "update", "upsert", "delete", "relate"}
        assert "where_clause" in tools["select"]["input_schema"]["properties"]
        assert "from" in tools["relate"]["input_schema"]["properties"]
        assert tools["relate"]["guarded_parameters"] == ["table"]
        assert tools["create"]["guarded_parameters"] == []

    def test_list_resources(self, client: TestClient) -> None:
        resources = client.get("/resources").json()["resources"]
        assert resources[0]["uri"] == "surrealmcp://instructions"

    def test_read_resource(self, client: TestClient) -> None:
        response = client.get("/resources/read", params={"uri": "surrealmcp://instructions"})
        assert response.status_code == 200
        assert response.json()["contents"][0]["mime_type"] == "text/markdown"

    def test_read_unknown_resource(self, client: TestClient) -> None:
        response = client.get("/resources/read", params={"uri": "surrealmcp://nope"})
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "resource_not_found"

    def test_read_resource_without_uri(self, client: TestClient) -> None:
        response = client.get("/resources/read")
        assert response.status_code == 400
        assert response.json()["error"]["parameter"] == "uri"
