"""Listing management - dashboard operations on a user's own properties."""

import re
import uuid
from typing import Iterable, Optional

from src.models.property import Property, PropertyPhoto, PropertyStatus
from src.models.user_context import Role, UserContext
from src.services.supabase_client import (
    create_property_photo,
    delete_property_photo_row,
    delete_property_row,
    get_properties_by_owner,
    get_property_by_id,
    get_property_by_slug,
    get_property_photo,
    get_property_photos,
    get_public_url,
    remove_objects,
    set_property_status,
    update_property as update_property_row,
    upload_object,
)
from src.utils.errors import NotAuthenticated, PermissionDenied, PhotoNotFound, PropertyNotFound
from src.utils.logging import get_structured_logger, mask_user_id, timed

logger = get_structured_logger(__name__)

DASHBOARD_ROLES = frozenset({Role.USER, Role.BROKER, Role.AGENCY})

# Columns a dashboard patch may not touch directly
PROTECTED_COLUMNS = frozenset({"id", "created_by", "created_at", "status", "published_at"})


def require_user(ctx: UserContext) -> str:
    """Return the user id or raise NotAuthenticated."""
    if not ctx.is_authenticated:
        raise NotAuthenticated("Não autenticado.")
    return ctx.user_id


def require_role(ctx: UserContext, allowed: Iterable[Role] = DASHBOARD_ROLES) -> None:
    """Raise unless the signed-in user has one of the allowed roles."""
    require_user(ctx)
    if ctx.role not in set(allowed):
        raise PermissionDenied(f"Role {ctx.role.value if ctx.role else None} is not allowed")


def photo_storage_path(property_id: str, filename: str) -> str:
    """<property_id>/<uuid>-<filename with whitespace as hyphens>."""
    safe_name = re.sub(r"\s+", "-", filename)
    return f"{property_id}/{uuid.uuid4()}-{safe_name}"


async def fetch_my_properties(ctx: UserContext) -> list[dict]:
    """Listings created by the signed-in user, newest first."""
    require_role(ctx)
    user_id = ctx.user_id
    rows = await get_properties_by_owner(user_id)
    logger.info("Fetched own properties", user_id=mask_user_id(user_id), count=len(rows))
    return rows


@timed("fetch_property")
async def fetch_property(key: str) -> Property:
    """
    Load a property for its public page.

    Tries the slug first, then the id. Photos come ordered by sort_order.
    """
    row = await get_property_by_slug(key)
    if row is None:
        row = await get_property_by_id(key)
    if row is None:
        raise PropertyNotFound(f"Property not found: {key}")

    photos = await get_property_photos(row["id"])
    return Property.model_validate({**row, "property_photos": photos})


async def require_owner(ctx: UserContext, property_id: str) -> dict:
    """
    Load a property the signed-in user may manage.

    The service role key bypasses row-level security, so ownership is
    checked here. Raises PropertyNotFound or PermissionDenied.
    """
    require_role(ctx)
    row = await get_property_by_id(property_id)
    if row is None:
        raise PropertyNotFound(f"Property not found: {property_id}")
    if row.get("created_by") != ctx.user_id:
        logger.warning(
            "Foreign property access denied",
            property_id=property_id,
            user_id=mask_user_id(ctx.user_id)
        )
        raise PermissionDenied(f"Property {property_id} belongs to another user")
    return row


async def fetch_property_for_edit(ctx: UserContext, property_id: str) -> tuple[dict, list[PropertyPhoto]]:
    """Raw property row plus its ordered photos."""
    row = await require_owner(ctx, property_id)
    photos = [PropertyPhoto.model_validate(p) for p in await get_property_photos(property_id)]
    return row, photos


async def update_property(ctx: UserContext, property_id: str, patch: dict) -> None:
    """Apply a partial update; status changes go through publish/unpublish."""
    await require_owner(ctx, property_id)
    updates = {k: v for k, v in patch.items() if k not in PROTECTED_COLUMNS}
    if not updates:
        return
    await update_property_row(property_id, updates)
    logger.info("Property updated", property_id=property_id, columns=sorted(updates))


async def publish_property(ctx: UserContext, property_id: str) -> None:
    await require_owner(ctx, property_id)
    await set_property_status(property_id, PropertyStatus.ACTIVE.value, published=True)
    logger.info("Property published", property_id=property_id)


async def unpublish_property(ctx: UserContext, property_id: str) -> None:
    await require_owner(ctx, property_id)
    await set_property_status(property_id, PropertyStatus.INACTIVE.value, published=False)
    logger.info("Property unpublished", property_id=property_id)


async def upload_property_photos(
    ctx: UserContext,
    property_id: str,
    files: list[tuple[str, bytes, Optional[str]]],
) -> list[str]:
    """
    Upload photos and register them in display order.

    files holds (filename, data, content_type) tuples. Stops at the first
    failure; photos already stored stay registered.
    """
    await require_owner(ctx, property_id)
    paths: list[str] = []
    for index, (filename, data, content_type) in enumerate(files):
        storage_path = photo_storage_path(property_id, filename)
        await upload_object(storage_path, data, content_type)
        url = await get_public_url(storage_path)
        await create_property_photo({
            "property_id": property_id,
            "url": url,
            "storage_path": storage_path,
            "sort_order": index,
        })
        paths.append(storage_path)

    logger.info("Property photos uploaded", property_id=property_id, count=len(paths))
    return paths


async def delete_photo(ctx: UserContext, photo_id: str, storage_path: Optional[str]) -> None:
    """
    Remove the stored object (when known), then the photo row.

    The photo's property must belong to the user, and the object removed must
    live under that property's folder.
    """
    require_role(ctx)
    photo = await get_property_photo(photo_id)
    if photo is None:
        raise PhotoNotFound(f"Photo not found: {photo_id}")
    property_id = photo["property_id"]
    await require_owner(ctx, property_id)

    path = photo.get("storage_path") or storage_path
    if path and not path.startswith(f"{property_id}/"):
        raise PermissionDenied(f"Storage path {path} is outside property {property_id}")
    if path:
        await remove_objects([path])
    await delete_property_photo_row(photo_id)


async def delete_property(ctx: UserContext, property_id: str) -> None:
    """Remove every stored photo, then the property (photo rows cascade)."""
    await require_owner(ctx, property_id)
    photos = await get_property_photos(property_id)
    paths = [p["storage_path"] for p in photos if p.get("storage_path")]
    if paths:
        await remove_objects(paths)
    await delete_property_row(property_id)
    logger.info("Property deleted", property_id=property_id, photos_removed=len(paths))
