"""
Tests for request models and the HTTP surface.
"""

import pytest
from fastapi.testclient import TestClient
from query_assembler.requests import QueryRequest
from main import app


@pytest.fixture
def client():
    return TestClient(app)


class TestQueryRequest:
    """Test JSON description -> assembler conversion."""

    def test_to_assembler(self):
        request = QueryRequest(
            table="users",
            fields=["id", "name"],
            where=[{"field": "age", "operator": ">", "value": 18}],
            or_where=[{"field": "status", "operator": "=", "value": "active"}]
        )

        sql, args = request.to_assembler().build_query()

        assert sql == "SELECT id, name FROM users WHERE age > $1 AND (status = $2)"
        assert args == [18, "active"]

    def test_nested_cte(self):
        request = QueryRequest.model_validate({
            "table": "recent",
            "fields": ["*"],
            "ctes": [{
                "name": "recent",
                "query": {
                    "table": "orders",
                    "fields": ["id"],
                    "where": [{"field": "created_at", "operator": ">", "value": "2024-01-01"}]
                }
            }],
            "joins": [{"table": "users", "foreign_key": "id", "primary_key": "user_id"}]
        })

        sql, args = request.to_assembler().build_query()

        assert sql == (
            "WITH recent AS (SELECT id FROM orders WHERE created_at > $1) "
            "SELECT * FROM recent JOIN users ON recent.user_id = users.id"
        )
        assert args == ["2024-01-01"]


class TestBuildEndpoint:
    """Test POST /build."""

    def test_build(self, client):
        response = client.post("/build", json={
            "table": "users",
            "fields": ["*"],
            "joins": [{"table": "orders", "foreign_key": "user_id", "primary_key": "id"}]
        })

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["sql"] == "SELECT * FROM users JOIN orders ON users.id = orders.user_id"
        assert body["args"] == []
        assert body["metadata"]["joins"] == 1
        assert body["metadata"]["numbering"] == "shared"
        assert "X-Execution-Time" in response.headers

    def test_build_per_query_numbering(self, client):
        payload = {
            "table": "recent",
            "fields": ["*"],
            "where": [{"field": "id", "operator": "<", "value": 50}],
            "ctes": [{
                "name": "recent",
                "query": {
                    "table": "orders",
                    "fields": ["id"],
                    "where": [{"field": "total", "operator": ">", "value": 100}]
                }
            }]
        }

        shared = client.post("/build", json=payload).json()
        legacy = client.post("/build?numbering=per_query", json=payload).json()

        assert shared["sql"].endswith("WHERE id < $2")
        assert legacy["sql"].endswith("WHERE id < $1")
        assert shared["args"] == legacy["args"] == [100, 50]
        assert shared["metadata"]["ctes"] == ["recent"]

    def test_build_with_validation_rejects(self, client):
        response = client.post("/build?validate=true", json={"table": "users"})

        assert response.status_code == 400
        detail = response.json()["detail"]
        assert detail["message"] == "Query validation failed"
        assert detail["errors"] == ["No fields selected from 'users'"]

    def test_build_without_validation_is_total(self, client):
        response = client.post("/build", json={"table": "t"})

        assert response.status_code == 200
        assert response.json()["sql"] == "SELECT  FROM t"

    def test_malformed_body(self, client):
        response = client.post("/build", json={"fields": ["id"]})

        assert response.status_code == 422


class TestOtherEndpoints:
    """Test /validate, /health and /."""

    def test_validate(self, client):
        response = client.post("/validate", json={
            "table": "users",
            "fields": ["id"],
            "where": [{"field": "age", "operator": "~=", "value": 1}]
        })

        assert response.status_code == 200
        assert response.json() == {
            "valid": False,
            "errors": ["Unknown operator '~=' on field 'age'"]
        }

    def test_validate_per_query_numbering(self, client):
        """Legacy numbering makes a CTE with arguments collide with the main query."""
        payload = {
            "table": "recent",
            "fields": ["*"],
            "where": [{"field": "id", "operator": "<", "value": 50}],
            "ctes": [{
                "name": "recent",
                "query": {
                    "table": "orders",
                    "fields": ["id"],
                    "where": [{"field": "total", "operator": ">", "value": 100}]
                }
            }]
        }

        shared = client.post("/validate?numbering=shared", json=payload).json()
        legacy = client.post("/validate?numbering=per_query", json=payload).json()

        assert shared == {"valid": True, "errors": []}
        assert legacy["valid"] is False
        assert len(legacy["errors"]) == 1

    def test_build_with_validation_accepts_dollar_in_field(self, client):
        response = client.post("/build?validate=true", json={
            "table": "t",
            "fields": ["jsonb_path_query(data, '$1')"]
        })

        assert response.status_code == 200
        assert response.json()["args"] == []

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert "build" in response.json()["endpoints"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
