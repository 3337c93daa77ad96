"""Example FastAPI app serving articles, people and comments as JSON:API.

Run with:
    uvicorn examples.jsonapi_example_app:app --reload
"""
from __future__ import annotations

from typing import Any, Iterator

from fastapi import Depends, FastAPI, Request
from pydantic import BaseModel, Field
from sqlalchemy import Column, ForeignKey, Integer, String, create_engine, select
from sqlalchemy.orm import Session, declarative_base, relationship, sessionmaker

from jsonapi_toolkit import (
    EntitySerializer,
    InlineRelationship,
    JSONAPIErrorBody,
    JSONAPIResponse,
    ReferenceRelationship,
    SerializeManager,
    install_jsonapi,
)
from jsonapi_toolkit.schemas import (
    parse_create_request,
    relationship_model,
    resource_identifier_model,
)
from jsonapi_toolkit.serializers import SerializerOptions
from jsonapi_toolkit.sqlalchemy import SQLAlchemyResolver
from jsonapi_toolkit.utils import parse_base_query, parse_list_query

DATABASE_URL = "sqlite:///./jsonapi_example.db"

engine = create_engine(DATABASE_URL, echo=True)
SessionLocal = sessionmaker(engine, expire_on_commit=False)

Base = declarative_base()


class Person(Base):
    __tablename__ = "people"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    articles = relationship("Article", back_populates="author")


class Article(Base):
    __tablename__ = "articles"

    id = Column(Integer, primary_key=True)
    title = Column(String, nullable=False)
    author_id = Column(Integer, ForeignKey("people.id"))
    author = relationship("Person", back_populates="articles", lazy="joined")
    comments = relationship("Comment", back_populates="article")


class Comment(Base):
    __tablename__ = "comments"

    id = Column(Integer, primary_key=True)
    body = Column(String, nullable=False)
    article_id = Column(Integer, ForeignKey("articles.id"))
    author_id = Column(Integer, ForeignKey("people.id"))
    article = relationship("Article", back_populates="comments")
    author = relationship("Person", lazy="joined")


def article_relationships(article: Article, options: SerializerOptions) -> dict[str, Any]:
    relationships: dict[str, Any] = {
        "author": InlineRelationship(type="person", entity=article.author)
        if article.author is not None
        else None,
    }
    comments = (options.sideloaded or {}).get(article.id, {}).get("comments")
    if comments is not None:
        relationships["comments"] = [
            InlineRelationship(type="comment", entity=comment) for comment in comments
        ]
    return relationships


serialize_manager = SerializeManager(
    {
        "article": EntitySerializer(
            get_id=lambda article: str(article.id),
            get_reference_id=lambda article_id: str(article_id),
            get_attributes=lambda article, _: {"title": article.title},
            get_relationships=article_relationships,
            get_resource_links=lambda article, _: {"self": f"/articles/{article.id}"},
        ),
        "person": EntitySerializer(
            get_id=lambda person: str(person.id),
            get_reference_id=lambda person_id: str(person_id),
            get_attributes=lambda person, _: {"name": person.name},
        ),
        "comment": EntitySerializer(
            get_id=lambda comment: str(comment.id),
            get_reference_id=lambda comment_id: str(comment_id),
            get_attributes=lambda comment, _: {"body": comment.body},
            get_relationships=lambda comment, _: {
                "author": InlineRelationship(type="person", entity=comment.author),
                "article": ReferenceRelationship(type="article", reference=comment.article_id),
            },
        ),
    }
)


class ArticleAttributes(BaseModel):
    title: str = Field(min_length=1)


AuthorRelationship = relationship_model(resource_identifier_model("person", int))


class CreateArticleRelationships(BaseModel):
    author: AuthorRelationship


app = FastAPI()
install_jsonapi(app)


def get_session() -> Iterator[Session]:
    with SessionLocal() as session:
        yield session


@app.on_event("startup")
def create_tables() -> None:
    Base.metadata.create_all(engine)


@app.get("/articles")
def list_articles(request: Request, session: Session = Depends(get_session)) -> JSONAPIResponse:
    query = parse_list_query(
        request.query_params,
        default_include=["author"],
        allowed_sort_fields=["title"],
    )
    statement = select(Article)
    for field_sort in query.sort or []:
        column = getattr(Article, field_sort.field)
        statement = statement.order_by(column.desc() if field_sort.order == "desc" else column)
    articles = session.scalars(statement).unique().all()
    return JSONAPIResponse(
        serialize_manager.serialize_many("article", articles, query.serializer_options)
    )


@app.get("/articles/{article_id}")
def get_article(
    article_id: int, request: Request, session: Session = Depends(get_session)
) -> JSONAPIResponse:
    options = parse_base_query(request.query_params, default_include=["author", "comments"])
    article = session.get(Article, article_id)
    if article is None:
        error = {"status": "404", "code": "not_found", "detail": f"Article with ID '{article_id}' not found"}
        return JSONAPIResponse(JSONAPIErrorBody(error), status_code=404)

    options.sideloaded = {article.id: {"comments": list(article.comments)}}
    return JSONAPIResponse(serialize_manager.serialize_one("article", article, options))


@app.post("/articles")
async def create_article(request: Request, session: Session = Depends(get_session)) -> JSONAPIResponse:
    parsed = parse_create_request(
        await request.json(),
        request.headers.get("content-type"),
        type_="article",
        attributes_model=ArticleAttributes,
        relationships_model=CreateArticleRelationships,
    )
    resolver = SQLAlchemyResolver(models={"person": Person}, session=session)
    author = await resolver.resolve(parsed.relationships.author.data.model_dump())
    if author is None:
        error = {"status": "404", "code": "not_found", "detail": "Author not found"}
        return JSONAPIResponse(JSONAPIErrorBody(error), status_code=404)

    article = Article(title=parsed.attributes.title, author=author)
    session.add(article)
    session.commit()
    return JSONAPIResponse(serialize_manager.serialize_one("article", article), status_code=201)
