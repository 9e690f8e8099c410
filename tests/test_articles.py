"""Tests for the article store and the summarize/rewrite helpers."""
import json

import pytest

from fakes import FakeLLM
from health_informer.agents.article_assistant import rewrite_article, summarize_article
from health_informer.errors import LLMError, ParseError
from health_informer.services import articles as article_store

SUMMARY_JSON = json.dumps({
    "tldr": "Walking helps sleep. Even short walks count.",
    "keyTakeaways": ["Walk daily", "Start small", "Sleep improves"],
})


class TestSummarizeArticle:
    @pytest.mark.asyncio
    async def test_parses_json_reply(self):
        llm = FakeLLM(summary=SUMMARY_JSON)

        summary = await summarize_article("Walking and sleep", "Article body", llm=llm)

        assert summary.tldr == "Walking helps sleep. Even short walks count."
        assert summary.key_takeaways == ["Walk daily", "Start small", "Sleep improves"]
        prompt = llm.invocations[0][0]["content"]
        assert "Article Title: Walking and sleep" in prompt
        assert "Article body" in prompt

    @pytest.mark.asyncio
    async def test_extracts_json_wrapped_in_prose(self):
        llm = FakeLLM(summary=f"Here is the summary:\n```json\n{SUMMARY_JSON}\n```")

        summary = await summarize_article("Walking and sleep", "Article body", llm=llm)

        assert len(summary.key_takeaways) == 3

    @pytest.mark.asyncio
    async def test_non_json_reply_raises_parse_error(self):
        with pytest.raises(ParseError, match="Failed to parse AI response"):
            await summarize_article("t", "c", llm=FakeLLM(summary="I cannot help with that."))

    @pytest.mark.asyncio
    async def test_wrong_takeaway_count_raises_parse_error(self):
        reply = json.dumps({"tldr": "Short.", "keyTakeaways": ["only one"]})

        with pytest.raises(ParseError):
            await summarize_article("t", "c", llm=FakeLLM(summary=reply))

    @pytest.mark.asyncio
    async def test_llm_failure_propagates(self):
        with pytest.raises(LLMError):
            await summarize_article("t", "c", llm=FakeLLM(fail_on={1}))


@pytest.mark.asyncio
async def test_rewrite_returns_trimmed_text():
    llm = FakeLLM(summary="Plain-language version.")

    rewritten = await rewrite_article("Diet study", "Dense clinical text", llm=llm)

    assert rewritten == "Plain-language version."
    assert "Original Article Title: Diet study" in llm.invocations[0][0]["content"]


class TestArticleStore:
    def test_bundled_articles_load(self):
        articles = article_store.list_articles(article_store.BUNDLED_ARTICLES_PATH)

        assert [a.id for a in articles] == ["1", "2", "3", "4"]
        assert all(a.title and a.content for a in articles)

    def test_get_article_by_id(self):
        article = article_store.get_article("3", article_store.BUNDLED_ARTICLES_PATH)

        assert article is not None
        assert "Diabetes" in article.title
        assert article_store.get_article("99", article_store.BUNDLED_ARTICLES_PATH) is None

    def test_custom_path_must_hold_a_list(self, tmp_path):
        path = tmp_path / "articles.json"
        path.write_text('{"id": "1"}', encoding="utf-8")

        with pytest.raises(ValueError):
            article_store.list_articles(path)

    def test_filter_by_interests_matches_hyphenated_ids(self):
        articles = article_store.list_articles(article_store.BUNDLED_ARTICLES_PATH)

        matched = article_store.filter_by_interests(articles, ["heart-disease", "sleep"])

        assert {a.id for a in matched} >= {"1", "2"}
        assert "4" not in {a.id for a in matched}

    def test_filter_without_interests_returns_everything(self):
        articles = article_store.list_articles(article_store.BUNDLED_ARTICLES_PATH)

        assert article_store.filter_by_interests(articles, []) == articles
