import json
import logging

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient
from pydantic import BaseModel

from jsonapi_toolkit import (
    EntitySerializer,
    HTTPError,
    JSONAPIResponse,
    SerializeManager,
    SerializeManagerOptions,
    install_jsonapi,
)
from jsonapi_toolkit.schemas import parse_create_request

JSONAPI = "application/vnd.api+json"

ARTICLES = {"1": {"id": "1", "title": "Hello"}}

manager = SerializeManager(
    {
        "article": EntitySerializer(
            get_id=lambda article: article["id"],
            get_reference_id=lambda article_id: article_id,
            get_attributes=lambda article, options: {"title": article["title"]},
        )
    }
)


class ArticleAttributes(BaseModel):
    title: str


@pytest.fixture
def errors():
    return []


def create_app(errors):
    app = FastAPI()
    install_jsonapi(app, log_error=lambda exc, exposed: errors.append((exc, exposed)))

    @app.get("/articles/{article_id}")
    def get_article(article_id: str) -> JSONAPIResponse:
        article = ARTICLES.get(article_id)
        if article is None:
            raise HTTPError(404, detail=f"Article {article_id} not found")
        return JSONAPIResponse(manager.serialize_one("article", article))

    @app.get("/articles")
    def list_articles() -> JSONAPIResponse:
        options = SerializeManagerOptions(extensions=["https://example.com/ext"])
        return JSONAPIResponse(manager.serialize_many("article", ARTICLES.values(), options))

    @app.post("/articles")
    async def create_article(request: Request) -> JSONAPIResponse:
        parsed = parse_create_request(
            await request.json(),
            request.headers.get("content-type"),
            type_="article",
            attributes_model=ArticleAttributes,
        )
        article = {"id": "2", "title": parsed.attributes.title}
        return JSONAPIResponse(manager.serialize_one("article", article), status_code=201)

    @app.get("/negotiated")
    def negotiated(request: Request) -> dict:
        return {"profiles": [media_type.profile for media_type in request.state.jsonapi_accept]}

    @app.get("/boom")
    def boom() -> None:
        raise RuntimeError("secret")

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    return app


@pytest.fixture
def client(errors, monkeypatch):
    monkeypatch.setenv("JSONAPI_EXCLUDED_PATHS", '["/health*"]')
    return TestClient(create_app(errors))


def test_get_resource(client):
    response = client.get("/articles/1", headers={"Accept": JSONAPI})

    assert response.status_code == 200
    assert response.headers["content-type"] == JSONAPI
    assert response.json() == {
        "jsonapi": {"version": "1.1"},
        "data": {"type": "article", "id": "1", "attributes": {"title": "Hello"}},
    }


def test_response_announces_extensions(client):
    response = client.get("/articles")

    assert response.headers["content-type"] == f'{JSONAPI}; ext="https://example.com/ext"'
    assert [resource["id"] for resource in response.json()["data"]] == ["1"]


def test_negotiated_media_types_are_exposed(client):
    response = client.get(
        "/negotiated", headers={"Accept": f'{JSONAPI};profile="https://p1 https://p2", */*;q=0.1'}
    )

    assert response.json() == {"profiles": [["https://p1", "https://p2"], []]}


@pytest.mark.parametrize("accept", ["text/html", f"{JSONAPI}; charset=utf-8"])
def test_not_acceptable(client, accept):
    response = client.get("/articles/1", headers={"Accept": accept})

    assert response.status_code == 406
    assert response.headers["content-type"] == JSONAPI
    assert response.json()["errors"][0]["code"] == "not_acceptable"


def test_malformed_accept_header(client):
    response = client.get("/articles/1", headers={"Accept": "text/html;q=2"})

    assert response.status_code == 400
    assert response.json()["errors"] == [
        {
            "status": "400",
            "code": "invalid_header",
            "title": "Invalid header",
            "detail": "Invalid weight: 2",
        }
    ]


def test_unsupported_request_media_type(client):
    response = client.post("/articles", json={"data": {"type": "article"}})

    assert response.status_code == 415
    assert response.json()["errors"][0]["code"] == "unsupported_media_type"


def test_create_resource(client):
    body = {"data": {"type": "article", "attributes": {"title": "New"}}}
    response = client.post(
        "/articles", content=json.dumps(body), headers={"Content-Type": JSONAPI}
    )

    assert response.status_code == 201
    assert response.json()["data"]["attributes"] == {"title": "New"}


def test_invalid_request_body(client, errors):
    body = {"data": {"type": "article", "attributes": {}}}
    response = client.post(
        "/articles", content=json.dumps(body), headers={"Content-Type": JSONAPI}
    )

    assert response.status_code == 422
    assert response.json()["errors"][0]["source"] == {"pointer": "/data/attributes/title"}
    assert [exposed for _, exposed in errors] == [True]


def test_http_error_from_handler(client):
    response = client.get("/articles/9")

    assert response.status_code == 404
    assert response.json()["errors"] == [
        {
            "status": "404",
            "code": "not_found",
            "title": "Not Found",
            "detail": "Article 9 not found",
        }
    ]


def test_unknown_route(client):
    response = client.get("/missing")

    assert response.status_code == 404
    assert response.headers["content-type"] == JSONAPI
    assert response.json()["errors"][0]["code"] == "not_found"


def test_method_not_allowed(client):
    response = client.delete("/articles/1")

    assert response.status_code == 405
    assert "GET" in response.headers["allow"]
    (error,) = response.json()["errors"]
    assert error["code"] == "method_not_allowed"
    assert error["detail"] == f"Allowed methods: {response.headers['allow']}"


def test_internal_error_is_hidden(client, errors, caplog):
    with caplog.at_level(logging.ERROR, logger="jsonapi_toolkit"):
        response = client.get("/boom")

    assert response.status_code == 500
    assert response.json()["errors"] == [
        {"status": "500", "code": "internal_server_error", "title": "Internal Server Error"}
    ]
    assert [(str(exc), exposed) for exc, exposed in errors] == [("secret", False)]
    assert any(record.exc_info for record in caplog.records)


def test_excluded_paths_skip_negotiation(client):
    response = client.get("/health", headers={"Accept": "text/html"})

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_configured_settings_apply_to_installed_app(errors, monkeypatch):
    monkeypatch.setenv("JSONAPI_JSONAPI_VERSION", "1.0")
    monkeypatch.setenv("JSONAPI_EXPOSE_INTERNAL_ERRORS", "true")
    monkeypatch.setenv("JSONAPI_EXCLUDED_PATHS", '["/articles*"]')
    client = TestClient(create_app(errors))

    response = client.get("/boom")
    assert response.status_code == 500
    assert response.json() == {
        "jsonapi": {"version": "1.0"},
        "errors": [
            {
                "status": "500",
                "code": "internal_server_error",
                "title": "Internal Server Error",
                "detail": "secret",
            }
        ],
    }

    response = client.get("/articles/1", headers={"Accept": "text/html"})
    assert response.status_code == 200
    assert response.json()["jsonapi"] == {"version": "1.0"}
