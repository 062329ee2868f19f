"""Configuration management for FieldSmith."""

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()


class Settings(BaseModel):
    """Application settings."""

    # Ambiguity policy - candidates within this many points of the best are contested
    ambiguity_gap: int = int(os.getenv("AMBIGUITY_GAP", "5"))
    # Contested headers are still auto-mapped at or above this score
    auto_accept_score: int = int(os.getenv("AUTO_ACCEPT_SCORE", "90"))
    max_candidates: int = int(os.getenv("MAX_CANDIDATES", "5"))

    # Work item type used when the caller does not name one
    default_item_type: str = os.getenv("DEFAULT_ITEM_TYPE", "Test Case")

    # Suggest a title-like header as System.Title when nothing else resolves to it
    title_fallback_heuristic: bool = os.getenv("TITLE_FALLBACK_HEURISTIC", "false").lower() == "true"

    # Preview rendering
    preview_max_rows: int = int(os.getenv("PREVIEW_MAX_ROWS", "5"))
    preview_steps_max_chars: int = int(os.getenv("PREVIEW_STEPS_MAX_CHARS", "100"))

    # Azure DevOps catalog fetcher
    ado_org_url: Optional[str] = os.getenv("ADO_ORG_URL")
    ado_pat: Optional[str] = os.getenv("ADO_PAT")
    ado_api_version: str = os.getenv("ADO_API_VERSION", "7.1")
    catalog_fetch_timeout: float = float(os.getenv("CATALOG_FETCH_TIMEOUT", "30"))


settings = Settings()
