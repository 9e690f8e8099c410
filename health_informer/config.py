from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Search provider
    search_provider: str = "tavily"  # tavily | brave
    tavily_api_key: str = ""
    tavily_base_url: str = "https://api.tavily.com"
    brave_api_key: str = ""
    search_depth: str = "advanced"  # basic | advanced
    search_timeout_seconds: float = 30.0
    max_sources_per_search: int = 10

    # LLM provider (all OpenAI-compatible)
    llm_provider: str = "openai"  # openai | openrouter | ollama
    openai_api_key: str = ""
    openai_llm_model: str = "gpt-4o-mini"
    openrouter_api_key: str = ""
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    openrouter_llm_model: str = "openai/gpt-4o-mini"
    ollama_api_url: str = "http://localhost:11434"
    ollama_llm_model: str = "llama3.2"
    llm_temperature: float = 0.3
    llm_max_tokens: int = 2048
    llm_timeout_seconds: float = 60.0

    # Search-and-synthesize pipeline
    max_display_sources: int = 6
    summary_min_content_chars: int = 100
    summary_content_chars: int = 2000
    context_fallback_chars: int = 500

    # Articles
    use_synthetic_data: bool = True
    articles_path: str = ""  # empty = bundled mock data

    # App
    cors_origins: str = "http://localhost:3000"
    app_log_level: str = "INFO"
    noisy_log_level: str = "WARNING"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",")]

    @property
    def search_api_key(self) -> str:
        provider = self.search_provider.lower().strip()
        if provider == "brave":
            return self.brave_api_key
        return self.tavily_api_key

    @property
    def search_available(self) -> bool:
        """Live search needs a real data mode and a key for the selected provider."""
        return not self.use_synthetic_data and bool(self.search_api_key)


settings = Settings()
