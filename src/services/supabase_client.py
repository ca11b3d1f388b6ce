"""Supabase client wrapper with async context manager support."""

import os
import logging
from datetime import datetime, timezone
from typing import Any, Optional
from supabase import create_client, Client
from supabase.client import ClientOptions
from src.utils.errors import SupabaseError
from src.utils.logging import mask_sensitive_data

logger = logging.getLogger(__name__)

PROPERTIES_TABLE = "properties"
PHOTOS_TABLE = "property_photos"
PHOTOS_BUCKET = os.environ.get("PROPERTY_PHOTOS_BUCKET", "property-photos")

# Global client instance (singleton pattern)
_client: Optional[Client] = None


def get_supabase_client() -> Client:
    """Get or create Supabase client singleton."""
    global _client

    if _client is None:
        url = os.environ.get("SUPABASE_URL")
        key = os.environ.get("SUPABASE_SERVICE_ROLE_KEY")

        if not url or not key:
            raise SupabaseError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set")

        options = ClientOptions(
            auto_refresh_token=False,
            persist_session=False,
        )

        _client = create_client(url, key, options)
        logger.info("Supabase client initialized", extra={"url": url})

    return _client


async def close_supabase_client() -> None:
    """Drop the client reference; supabase-py has no explicit close."""
    global _client
    if _client:
        _client = None
        logger.info("Supabase client closed")


class SupabaseClient:
    """Async context manager for Supabase client."""

    def __init__(self):
        self.client: Optional[Client] = None

    async def __aenter__(self) -> Client:
        self.client = get_supabase_client()
        return self.client

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if exc_type:
            logger.error(
                "Supabase operation error",
                extra={"error": mask_sensitive_data(str(exc_val)), "error_type": exc_type.__name__}
            )
        return False


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# Properties table operations
async def get_properties_by_owner(user_id: str) -> list[dict]:
    """Get all properties created by a user, newest first."""
    async with SupabaseClient() as client:
        try:
            result = (
                client.table(PROPERTIES_TABLE)
                .select("id,slug,title,purpose,type,status,city,neighborhood,price,rent,created_at,published_at")
                .eq("created_by", user_id)
                .order("created_at", desc=True)
                .execute()
            )
            return result.data if result.data else []
        except Exception as e:
            raise SupabaseError(f"Failed to get properties for owner: {e}") from e


async def get_property_by_id(property_id: str) -> Optional[dict]:
    """Get property by ID."""
    async with SupabaseClient() as client:
        try:
            result = client.table(PROPERTIES_TABLE).select("*").eq("id", property_id).limit(1).execute()
            return result.data[0] if result.data else None
        except Exception as e:
            raise SupabaseError(f"Failed to get property: {e}") from e


async def get_property_by_slug(slug: str) -> Optional[dict]:
    """Get property by slug."""
    async with SupabaseClient() as client:
        try:
            result = client.table(PROPERTIES_TABLE).select("*").eq("slug", slug).limit(1).execute()
            return result.data[0] if result.data else None
        except Exception as e:
            raise SupabaseError(f"Failed to get property by slug: {e}") from e


async def update_property(property_id: str, updates: dict) -> None:
    """Update a property."""
    async with SupabaseClient() as client:
        try:
            client.table(PROPERTIES_TABLE).update(updates).eq("id", property_id).execute()
        except Exception as e:
            raise SupabaseError(f"Failed to update property {property_id}: {e}") from e


async def set_property_status(property_id: str, status: str, published: bool) -> None:
    """Set status and published_at together."""
    await update_property(property_id, {
        "status": status,
        "published_at": _now_iso() if published else None,
    })


async def delete_property_row(property_id: str) -> None:
    """Delete a property row (photo rows cascade)."""
    async with SupabaseClient() as client:
        try:
            client.table(PROPERTIES_TABLE).delete().eq("id", property_id).execute()
        except Exception as e:
            raise SupabaseError(f"Failed to delete property {property_id}: {e}") from e


# Property photos table operations
async def get_property_photos(property_id: str) -> list[dict]:
    """Get photos for a property ordered by sort_order."""
    async with SupabaseClient() as client:
        try:
            result = (
                client.table(PHOTOS_TABLE)
                .select("id,url,sort_order,storage_path")
                .eq("property_id", property_id)
                .order("sort_order")
                .execute()
            )
            return result.data if result.data else []
        except Exception as e:
            raise SupabaseError(f"Failed to get property photos: {e}") from e


async def get_property_photo(photo_id: str) -> Optional[dict]:
    """Get a single photo row by ID."""
    async with SupabaseClient() as client:
        try:
            result = (
                client.table(PHOTOS_TABLE)
                .select("id,property_id,url,sort_order,storage_path")
                .eq("id", photo_id)
                .limit(1)
                .execute()
            )
            return result.data[0] if result.data else None
        except Exception as e:
            raise SupabaseError(f"Failed to get photo {photo_id}: {e}") from e


async def create_property_photo(photo_data: dict) -> None:
    """Insert a property photo row."""
    async with SupabaseClient() as client:
        try:
            client.table(PHOTOS_TABLE).insert(photo_data).execute()
        except Exception as e:
            raise SupabaseError(f"Failed to create property photo: {e}") from e


async def delete_property_photo_row(photo_id: str) -> None:
    """Delete a property photo row."""
    async with SupabaseClient() as client:
        try:
            client.table(PHOTOS_TABLE).delete().eq("id", photo_id).execute()
        except Exception as e:
            raise SupabaseError(f"Failed to delete photo {photo_id}: {e}") from e


# Object storage operations
async def upload_object(path: str, data: bytes, content_type: Optional[str] = None) -> None:
    """Upload bytes to the photos bucket (no overwrite)."""
    options: dict[str, Any] = {"upsert": "false", "cache-control": "3600"}
    if content_type:
        options["content-type"] = content_type
    async with SupabaseClient() as client:
        try:
            client.storage.from_(PHOTOS_BUCKET).upload(path, data, options)
        except Exception as e:
            raise SupabaseError(f"Failed to upload {path}: {e}") from e


async def get_public_url(path: str) -> str:
    """Public URL of an object in the photos bucket."""
    async with SupabaseClient() as client:
        try:
            return client.storage.from_(PHOTOS_BUCKET).get_public_url(path)
        except Exception as e:
            raise SupabaseError(f"Failed to get public URL for {path}: {e}") from e


async def remove_objects(paths: list[str]) -> None:
    """Remove objects from the photos bucket."""
    if not paths:
        return
    async with SupabaseClient() as client:
        try:
            client.storage.from_(PHOTOS_BUCKET).remove(paths)
        except Exception as e:
            raise SupabaseError(f"Failed to remove objects: {e}") from e
