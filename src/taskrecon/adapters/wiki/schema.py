"""Pydantic models describing the MediaWiki action API payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class WikiBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class WikiError(WikiBaseModel):
    code: str | None = None
    info: str | None = None


class WikiText(WikiBaseModel):
    content: str = Field(alias="*")


class ParsedPage(WikiBaseModel):
    title: str | None = None
    wikitext: WikiText | None = None


class ParseResponse(WikiBaseModel):
    parse: ParsedPage | None = None
    error: WikiError | None = None


class RevisionPayload(WikiBaseModel):
    timestamp: datetime | None = None
    user: str | None = None
    comment: str | None = None


class QueryPage(WikiBaseModel):
    title: str | None = None
    revisions: list[RevisionPayload] = Field(default_factory=list)


class QueryResult(WikiBaseModel):
    pages: dict[str, QueryPage] = Field(default_factory=dict)


class RevisionResponse(WikiBaseModel):
    query: QueryResult | None = None
    error: WikiError | None = None

    def latest_revision(self) -> RevisionPayload | None:
        if self.query is None:
            return None
        for page in self.query.pages.values():
            if page.revisions:
                return page.revisions[0]
        return None
