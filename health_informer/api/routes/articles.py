from __future__ import annotations

from fastapi import APIRouter, HTTPException

from health_informer.agents.article_assistant import rewrite_article, summarize_article
from health_informer.config import settings
from health_informer.errors import LLMError, ParseError, SearchError
from health_informer.models.schemas import (
    ArticleRequest,
    ArticleResponse,
    ArticleSearchRequest,
    ArticleSearchResponse,
    ArticlesResponse,
    RewriteResponse,
    SearchSource,
    SummarizeResponse,
)
from health_informer.services import articles as article_store
from health_informer.services import logger as log_service
from health_informer.tools.search_provider import UnifiedSearchClient

router = APIRouter(prefix="/api/health-news", tags=["articles"])


def _require_article_fields(request: ArticleRequest) -> None:
    if not (request.article_id and request.title and request.content):
        raise HTTPException(status_code=400, detail="Missing required fields")


@router.get("/articles", response_model=ArticlesResponse)
async def list_articles(interests: str = ""):
    """List mock articles, optionally narrowed to comma-separated interest ids."""
    try:
        articles = article_store.list_articles()
    except (OSError, ValueError) as e:
        log_service.log_event(event_type="articles_error", message="Failed to load articles", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to load articles")

    wanted = [i.strip() for i in interests.split(",") if i.strip()]
    return ArticlesResponse(articles=article_store.filter_by_interests(articles, wanted))


@router.get("/articles/{article_id}", response_model=ArticleResponse)
async def get_article(article_id: str):
    try:
        article = article_store.get_article(article_id)
    except (OSError, ValueError) as e:
        log_service.log_event(event_type="articles_error", message="Failed to load article", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to load article")
    if article is None:
        raise HTTPException(status_code=404, detail="Article not found")
    return ArticleResponse(article=article)


@router.post("/articles/search", response_model=ArticleSearchResponse)
async def search_articles(request: ArticleSearchRequest):
    """Plain web search without any AI processing."""
    query = request.query.strip()
    if not query:
        raise HTTPException(status_code=400, detail="Query is required")
    if not settings.search_available:
        raise HTTPException(
            status_code=503,
            detail="Search is not available. Set USE_SYNTHETIC_DATA=false and configure a search API key.",
        )

    try:
        response = await UnifiedSearchClient().search(query, limit=request.limit)
    except (SearchError, ParseError) as e:
        raise HTTPException(status_code=502, detail=str(e))

    return ArticleSearchResponse(
        sources=[
            SearchSource(url=r.url, title=r.title, content=r.content or r.markdown, score=r.score)
            for r in response.data
        ],
        query=query,
    )


@router.post("/summarize", response_model=SummarizeResponse)
async def summarize(request: ArticleRequest):
    _require_article_fields(request)
    try:
        summary = await summarize_article(request.title, request.content)
    except ParseError as e:
        log_service.log_event(
            event_type="summarize_parse_error",
            message=str(e),
            article_id=request.article_id,
        )
        raise HTTPException(status_code=500, detail=str(e))
    except LLMError as e:
        raise HTTPException(status_code=502, detail=str(e))

    return SummarizeResponse(article_id=request.article_id, summary=summary)


@router.post("/rewrite", response_model=RewriteResponse)
async def rewrite(request: ArticleRequest):
    _require_article_fields(request)
    try:
        rewritten = await rewrite_article(request.title, request.content)
    except (LLMError, ParseError) as e:
        raise HTTPException(status_code=502, detail=str(e))

    return RewriteResponse(article_id=request.article_id, rewritten_content=rewritten)
