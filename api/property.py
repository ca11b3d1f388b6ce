"""Property detail endpoint (Vercel serverless function)."""

import json
import asyncio
import logging

from src.services.listing_manager import fetch_property
from src.utils.errors import PropertyNotFound, SupabaseError
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


def _property_key(request: dict) -> str:
    """?key=<slug-or-id>, else the last segment of /imovel/<slug-or-id>."""
    query_params = request.get("query", {}) or {}
    key = query_params.get("key")
    if isinstance(key, list):
        key = key[0] if key else None
    if key:
        return str(key).strip()
    segments = [s for s in request.get("path", "").split("?", 1)[0].split("/") if s]
    if len(segments) >= 2 and segments[-2] == "imovel":
        return segments[-1]
    return ""


def handler(request):
    """Return one property with its photos."""
    with correlation_context():
        key = _property_key(request)
        if not key:
            return _response(400, {"error": "missing property key"})

        try:
            prop = asyncio.run(fetch_property(key))
            payload = prop.model_dump(mode="json")
            payload["applicable_price"] = prop.applicable_price
            return _response(200, payload)
        except PropertyNotFound:
            return _response(404, {"error": "Imóvel não encontrado."})
        except SupabaseError as e:
            logger.warning(f"Property lookup failed: {e}")
            return _response(503, {"error": "Erro ao carregar imóvel."})
        except Exception as e:
            logger.error(f"Error loading property: {e}", exc_info=True)
            return _response(500, {"error": "internal server error"})
