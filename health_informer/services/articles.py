"""Read-only store for the bundled mock health-news articles."""
from __future__ import annotations

import json
from pathlib import Path

from health_informer.config import settings
from health_informer.models.schemas import HealthArticle

BUNDLED_ARTICLES_PATH = Path(__file__).resolve().parents[1] / "data" / "health-news.json"


def _articles_path() -> Path:
    return Path(settings.articles_path) if settings.articles_path else BUNDLED_ARTICLES_PATH


def list_articles(path: Path | None = None) -> list[HealthArticle]:
    payload = json.loads((path or _articles_path()).read_text(encoding="utf-8"))
    if not isinstance(payload, list):
        raise ValueError("Article data must be a JSON array.")
    return [HealthArticle.model_validate(item) for item in payload]


def get_article(article_id: str, path: Path | None = None) -> HealthArticle | None:
    return next((a for a in list_articles(path) if a.id == article_id), None)


def filter_by_interests(articles: list[HealthArticle], interests: list[str]) -> list[HealthArticle]:
    """Keyword match of interest ids (e.g. `heart-disease`) against title and body."""
    if not interests:
        return articles
    keywords = [interest.replace("-", " ").lower() for interest in interests]
    return [
        a
        for a in articles
        if any(k in f"{a.title} {a.content}".lower() for k in keywords)
    ]
