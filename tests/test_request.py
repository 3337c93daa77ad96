from typing import Optional, Union

import pytest
from pydantic import BaseModel

from jsonapi_toolkit.core.exceptions import InputValidationError, PydanticValidationError
from jsonapi_toolkit.schemas import (
    IncludedTypeSchema,
    client_resource_identifier_model,
    parse_create_request,
    parse_relationship_update_request,
    parse_update_request,
    relationship_model,
    resource_identifier_model,
    validate_content_type,
)

CONTENT_TYPE = "application/vnd.api+json"


class ArticleAttributes(BaseModel):
    title: str


class ArticleRelationships(BaseModel):
    author: relationship_model(resource_identifier_model("person"))


class TagAttributes(BaseModel):
    label: str


class DraftRelationships(BaseModel):
    tags: relationship_model(list[client_resource_identifier_model("tag")])


class CommentAttributes(BaseModel):
    body: str


PersonIdentifier = resource_identifier_model("person")


class FlexibleRelationships(BaseModel):
    author: relationship_model(Optional[Union[PersonIdentifier, list[PersonIdentifier]]])


def article_body(**data):
    return {
        "data": {
            "type": "article",
            "attributes": {"title": "Hello"},
            "relationships": {"author": {"data": {"type": "person", "id": "p1"}}},
            **data,
        }
    }


@pytest.mark.parametrize(
    "content_type",
    [
        CONTENT_TYPE,
        'application/vnd.api+json; ext="https://example.com/ext"',
        "Application/VND.API+JSON; profile=https",
    ],
)
def test_validate_content_type_accepts_jsonapi(content_type):
    validate_content_type(content_type)


@pytest.mark.parametrize(
    "content_type",
    [
        None,
        "",
        "application/json",
        "application/vnd.api+json; charset=utf-8",
        "application/vnd.api+json, text/plain",
    ],
)
def test_validate_content_type_rejects(content_type):
    with pytest.raises(InputValidationError) as exc_info:
        validate_content_type(content_type)

    assert exc_info.value.status == 415
    assert exc_info.value.errors[0]["code"] == "unsupported_media_type"


def test_parse_create_request():
    parsed = parse_create_request(
        article_body(),
        CONTENT_TYPE,
        type_="article",
        attributes_model=ArticleAttributes,
        relationships_model=ArticleRelationships,
    )

    assert parsed.id is None
    assert parsed.type == "article"
    assert parsed.attributes == ArticleAttributes(title="Hello")
    assert parsed.relationships.author.data.id == "p1"
    assert parsed.included_types is None


def test_parse_create_request_with_client_id():
    parsed = parse_create_request(
        article_body(id="a1"), CONTENT_TYPE, type_="article", attributes_model=ArticleAttributes,
        relationships_model=ArticleRelationships,
    )

    assert parsed.id == "a1"


def test_parse_create_request_type_mismatch_is_conflict():
    with pytest.raises(PydanticValidationError) as exc_info:
        parse_create_request(
            article_body(type="comment"),
            CONTENT_TYPE,
            type_="article",
            attributes_model=ArticleAttributes,
            relationships_model=ArticleRelationships,
        )

    error = exc_info.value
    assert error.status == 409
    assert error.errors[0]["code"] == "type_mismatch"
    assert error.errors[0]["source"] == {"pointer": "/data/type"}


def test_parse_create_request_relationship_type_mismatch():
    body = article_body(relationships={"author": {"data": {"type": "robot", "id": "r1"}}})

    with pytest.raises(PydanticValidationError) as exc_info:
        parse_create_request(
            body,
            CONTENT_TYPE,
            type_="article",
            attributes_model=ArticleAttributes,
            relationships_model=ArticleRelationships,
        )

    assert exc_info.value.errors[0]["source"] == {
        "pointer": "/data/relationships/author/data/type"
    }


def test_parse_create_request_missing_attribute():
    with pytest.raises(PydanticValidationError) as exc_info:
        parse_create_request(
            article_body(attributes={}),
            CONTENT_TYPE,
            type_="article",
            attributes_model=ArticleAttributes,
            relationships_model=ArticleRelationships,
        )

    error = exc_info.value
    assert error.status == 422
    assert error.errors[0]["code"] == "missing"
    assert error.errors[0]["source"] == {"pointer": "/data/attributes/title"}


def test_parse_create_request_checks_content_type_first():
    with pytest.raises(InputValidationError) as exc_info:
        parse_create_request({}, "application/json", type_="article")

    assert exc_info.value.status == 415


def test_parse_update_request_id_mismatch():
    with pytest.raises(PydanticValidationError) as exc_info:
        parse_update_request(
            "a1",
            article_body(id="a2"),
            CONTENT_TYPE,
            type_="article",
            attributes_model=ArticleAttributes,
            relationships_model=ArticleRelationships,
        )

    error = exc_info.value
    assert error.status == 409
    assert error.errors[0]["code"] == "id_mismatch"
    assert error.errors[0]["source"] == {"pointer": "/data/id"}


def test_parse_update_request_without_relationships():
    parsed = parse_update_request(
        "a1",
        {"data": {"type": "article", "id": "a1", "attributes": {"title": "New"}}},
        CONTENT_TYPE,
        type_="article",
        attributes_model=ArticleAttributes,
    )

    assert parsed.id == "a1"
    assert parsed.attributes.title == "New"
    assert parsed.relationships is None


def test_parse_create_request_with_included_resources():
    body = {
        "data": {
            "type": "draft",
            "relationships": {
                "tags": {"data": [{"type": "tag", "lid": "t1"}, {"type": "tag", "lid": "t2"}]}
            },
        },
        "included": [{"type": "tag", "lid": "t1", "attributes": {"label": "python"}}],
    }

    parsed = parse_create_request(
        body,
        CONTENT_TYPE,
        type_="draft",
        relationships_model=DraftRelationships,
        included_types={"tag": IncludedTypeSchema(attributes_model=TagAttributes)},
    )

    tags = parsed.included_types["tag"]
    assert tags.get("t1").attributes == TagAttributes(label="python")
    assert tags.try_get("t2") is None
    with pytest.raises(InputValidationError) as exc_info:
        tags.get("t2")
    assert exc_info.value.status == 422
    assert exc_info.value.errors[0]["code"] == "missing_included_resource"


def test_parse_relationship_update_request():
    body = {"data": [{"type": "tag", "id": "1"}, {"type": "tag", "id": "2"}]}

    assert parse_relationship_update_request(body, CONTENT_TYPE, "tag", int) == [1, 2]
    assert parse_relationship_update_request({"data": []}, CONTENT_TYPE, "tag") == []


def test_parse_relationship_update_request_rejects_wrong_type():
    with pytest.raises(PydanticValidationError) as exc_info:
        parse_relationship_update_request(
            {"data": [{"type": "person", "id": "1"}]}, CONTENT_TYPE, "tag"
        )

    assert exc_info.value.errors[0]["source"] == {"pointer": "/data/0/type"}


def test_included_errors_point_into_the_included_array():
    body = {
        "data": {"type": "draft"},
        "included": [
            {"type": "tag", "lid": "t1", "attributes": {"label": "python"}},
            {"type": "comment", "lid": "c1", "attributes": {}},
        ],
    }

    with pytest.raises(PydanticValidationError) as exc_info:
        parse_create_request(
            body,
            CONTENT_TYPE,
            type_="draft",
            included_types={
                "comment": IncludedTypeSchema(attributes_model=CommentAttributes),
                "tag": IncludedTypeSchema(attributes_model=TagAttributes),
            },
        )

    assert [error["source"] for error in exc_info.value.errors] == [
        {"pointer": "/included/1/attributes/body"}
    ]


def test_union_relationship_errors_point_at_the_linkage():
    body = article_body(relationships={"author": {"data": {"type": "person"}}})

    with pytest.raises(PydanticValidationError) as exc_info:
        parse_create_request(
            body,
            CONTENT_TYPE,
            type_="article",
            attributes_model=ArticleAttributes,
            relationships_model=FlexibleRelationships,
        )

    pointers = {error["source"]["pointer"] for error in exc_info.value.errors}
    assert pointers == {
        "/data/relationships/author/data/id",
        "/data/relationships/author/data",
    }


@pytest.mark.parametrize(
    "data, expected",
    [
        ({"type": "person", "id": "p1"}, "p1"),
        ([{"type": "person", "id": "p1"}], ["p1"]),
        (None, None),
    ],
)
def test_union_relationship_accepts_to_one_and_to_many(data, expected):
    parsed = parse_create_request(
        article_body(relationships={"author": {"data": data}}),
        CONTENT_TYPE,
        type_="article",
        attributes_model=ArticleAttributes,
        relationships_model=FlexibleRelationships,
    )

    linkage = parsed.relationships.author.data
    if isinstance(linkage, list):
        linkage = [identifier.id for identifier in linkage]
    elif linkage is not None:
        linkage = linkage.id
    assert linkage == expected
