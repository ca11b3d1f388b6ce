"""Listings search endpoint (Vercel serverless function)."""

import json
import asyncio
import logging

from src.services.filter_canonicalizer import canonicalize, to_query_params
from src.services.query_executor import execute
from src.services.slug_codec import build_listing_path, parse_listing_path
from src.utils.errors import StoreUnavailable
from src.utils.logging import correlation_context
from src.utils.logging_config import LoggingConfig

LoggingConfig.setup_logging()
logger = logging.getLogger(__name__)


def _response(status: int, payload: dict) -> dict:
    return {
        "statusCode": status,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(payload, ensure_ascii=False),
    }


def handler(request):
    """
    Search listings.

    The request path carries the SEO segments (/aluguel/barreiras/casas/3quartos)
    and the query string carries the sidebar filters; path segments win.
    """
    with correlation_context():
        try:
            route = parse_listing_path(request.get("path", ""))
            query_params = request.get("query", {}) or {}
            filters = canonicalize(route, query_params)

            result = asyncio.run(execute(filters))

            body = result.model_dump(mode="json")
            body["filters"] = filters.model_dump(mode="json", exclude_none=True)
            body["query"] = to_query_params(filters)
            body["canonical_path"] = build_listing_path(
                filters.purpose, filters.city, filters.type, filters.bedrooms
            )
            return _response(200, body)

        except StoreUnavailable as e:
            logger.warning(f"Listings store unavailable: {e}")
            return _response(503, {"error": "Erro ao carregar listagens."})
        except Exception as e:
            logger.error(f"Error searching listings: {e}", exc_info=True)
            return _response(500, {"error": "internal server error"})
