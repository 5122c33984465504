# app/core/constants.py
from __future__ import annotations

from typing import Literal

APP_DESCRIPTION = "Intelligent document rendering and interaction system"

RenderMode = Literal["static", "dynamic"]
LockMode = Literal["locked", "semi-dynamic", "dynamic"]

# Cache TTLs (seconds)
CACHE_TTL_CHAT_RESPONSE = 300

# API limits
CHAT_QUERY_MAX_LENGTH = 1000
SEARCH_RESULTS_LIMIT = 10

# Embeddings
EMBEDDING_DIMENSIONS = 1536
DEFAULT_EMBEDDING_MODEL = "text-embedding-3-small"

# role every reader holds; sections without explicit roles get it
ROLE_ALL = "all"
