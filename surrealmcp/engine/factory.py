"""Query engine factory."""

from __future__ import annotations

import httpx

from surrealmcp.config import Config
from surrealmcp.engine.http_engine import SurrealHttpEngine
from surrealmcp.engine.protocol import QueryEngine
from surrealmcp.utils.logger import get_logger

logger = get_logger(__name__)


def create_query_engine(config: Config, http_client: httpx.AsyncClient) -> QueryEngine:
    """Create the QueryEngine for ``config.database``.

    Args:
        config:      Application Config.
        http_client: Shared httpx.AsyncClient (owned by the lifespan).
    """
    engine = SurrealHttpEngine(config.database, http_client)
    logger.info(
        "query_engine_selected",
        engine="SurrealHttpEngine",
        endpoint=engine.base_url,
        namespace=config.database.namespace,
        database=config.database.database,
        # Only whether credentials are set, never the password
        credentials=config.database.username is not None,
    )
    return engine
