"""FastAPI dependencies, error handlers and functional ingress parsers."""
from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from rulekit.errors import ErrorCode, register_error_handlers
from rulekit.validation import Validator, parse_batch, parse_ingress, validated_body, validated_query

signup = Validator(
    {"email": "required|email", "age": "required|integer|min:18", "address": "nested:address"},
    validators={"address": Validator({"city": "required|string"})},
)
search = Validator({"q": "required|string|min:2", "page": "integer|min:1", "tag": "array"})
broken = Validator({"x": "required|mystery"})


@pytest.fixture
def client() -> TestClient:
    app = FastAPI()
    register_error_handlers(app)

    @app.post("/signup")
    async def create(body: dict = validated_body(signup)):
        return body

    @app.get("/search")
    async def find(params: dict = validated_query(search)):
        return params

    @app.post("/broken")
    async def fail(body: dict = validated_body(broken)):
        return body

    return TestClient(app, raise_server_exceptions=False)


def test_valid_body_is_parsed(client):
    response = client.post("/signup", json={"email": "a@example.com", "age": "21", "admin": True})
    assert response.status_code == 200
    assert response.json() == {"email": "a@example.com", "age": 21}


def test_invalid_body_lists_every_path(client):
    response = client.post("/signup", json={"email": "nope", "age": 12, "address": {}})
    assert response.status_code == 400
    error = response.json()["error"]
    assert error["type"] == "validation_error"
    assert set(error["errors"]) == {"email", "age", "address.city"}
    assert error["failed"]["age"] == {"min": ["18"]}


def test_malformed_json(client):
    response = client.post("/signup", content=b"{not json", headers={"Content-Type": "application/json"})
    assert response.status_code == 400
    assert response.json()["error"]["code"] == ErrorCode.E2021_INVALID_JSON.name


def test_query_parameters(client):
    response = client.get("/search", params=[("q", "owl"), ("page", "2"), ("tag", "a"), ("tag", "b")])
    assert response.status_code == 200
    assert response.json() == {"q": "owl", "page": 2, "tag": ["a", "b"]}
    assert client.get("/search", params={"q": "o"}).status_code == 400


def test_configuration_error_is_server_fault(client):
    response = client.post("/broken", json={"x": 1}, headers={"X-Correlation-ID": "abc123"})
    assert response.status_code == 500
    error = response.json()["error"]
    assert error["code"] == ErrorCode.E7001_UNKNOWN_RULE.name
    assert error["correlation_id"] == "abc123"


def test_parse_ingress():
    assert parse_ingress(signup, {"email": "a@example.com", "age": 30}).unwrap() == {
        "email": "a@example.com", "age": 30}
    error = parse_ingress(signup, {"age": 30}).unwrap_err()
    assert error.code is ErrorCode.E2000_VALIDATION_GENERIC
    assert error.context.origin == "ingress"
    assert error.metadata["field"] == "email"


def test_parse_batch():
    items = [{"email": "a@example.com", "age": 30}, {"age": 1}, {"email": "b@example.com", "age": "40"}]
    errors = parse_batch(signup, items).unwrap_err()
    assert [idx for idx, _ in errors] == [1]
    assert errors[0][1].metadata["batch_index"] == 1
    assert parse_batch(signup, [items[0], items[2]]).unwrap() == [
        {"email": "a@example.com", "age": 30}, {"email": "b@example.com", "age": 40}]


def test_parse_batch_stops_at_max_errors():
    errors = parse_batch(signup, [{}] * 10, max_errors=3).unwrap_err()
    assert len(errors) == 3
