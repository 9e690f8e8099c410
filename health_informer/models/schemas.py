from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class WireModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(populate_by_name=True)


# --- Domain ---


class ArticleSummary(WireModel):
    tldr: str
    key_takeaways: list[str] = Field(alias="keyTakeaways", min_length=3, max_length=3)


class HealthArticle(WireModel):
    id: str
    title: str
    source: str = ""
    date: str = ""
    image_url: str = Field(default="", alias="imageUrl")
    content: str = ""
    summary: ArticleSummary | None = None
    rewritten_content: str | None = Field(default=None, alias="rewrittenContent")


# --- Requests ---


class SearchStreamRequest(BaseModel):
    query: str = ""


class ArticleSearchRequest(BaseModel):
    query: str = ""
    limit: int | None = Field(default=None, ge=1, le=50)


class ArticleRequest(WireModel):
    article_id: str = Field(default="", alias="articleId")
    title: str = ""
    content: str = ""


# --- Responses ---


class SearchSource(BaseModel):
    url: str
    title: str
    content: str
    score: float = 0.0


class ArticleSearchResponse(BaseModel):
    sources: list[SearchSource]
    query: str
    success: bool = True


class SummarizeResponse(WireModel):
    article_id: str = Field(alias="articleId")
    summary: ArticleSummary
    success: bool = True


class RewriteResponse(WireModel):
    article_id: str = Field(alias="articleId")
    rewritten_content: str = Field(alias="rewrittenContent")
    success: bool = True


class ArticlesResponse(BaseModel):
    articles: list[HealthArticle]
    success: bool = True


class ArticleResponse(BaseModel):
    article: HealthArticle
    success: bool = True


class ConfigSummaryResponse(WireModel):
    use_synthetic_data: bool = Field(alias="useSyntheticData")
    search_provider: str = Field(alias="searchProvider")
    has_search_api_key: bool = Field(alias="hasSearchApiKey")
    search_available: bool = Field(alias="searchAvailable")
    llm_provider: str = Field(alias="llmProvider")
