"""Tests for the Supabase helper functions."""

import pytest
from unittest.mock import MagicMock, patch
from src.services import supabase_client
from src.services.supabase_client import (
    PHOTOS_BUCKET,
    get_property_by_slug,
    get_property_photo,
    get_property_photos,
    remove_objects,
    set_property_status,
    upload_object,
)
from src.utils.errors import SupabaseError


@pytest.fixture
def patched_client(mock_supabase_client):
    with patch('src.services.supabase_client.SupabaseClient') as mock_client_class:
        mock_client_class.return_value.__aenter__.return_value = mock_supabase_client
        mock_client_class.return_value.__aexit__.return_value = None
        yield mock_supabase_client


@pytest.mark.unit
@pytest.mark.asyncio
async def test_get_property_by_slug_found(patched_client):
    patched_client.builder.execute.return_value = MagicMock(data=[{"id": "prop-1", "slug": "casa-centro"}])

    row = await get_property_by_slug("casa-centro")

    assert row["id"] == "prop-1"
    patched_client.builder.eq.assert_called_once_with("slug", "casa-centro")


@pytest.mark.unit
@pytest.mark.asyncio
async def test_get_property_by_slug_missing(patched_client):
    patched_client.builder.execute.return_value = MagicMock(data=[])

    assert await get_property_by_slug("nao-existe") is None


@pytest.mark.unit
@pytest.mark.asyncio
async def test_get_property_photos_ordered(patched_client):
    await get_property_photos("prop-1")

    patched_client.table.assert_called_once_with("property_photos")
    patched_client.builder.order.assert_called_once_with("sort_order")


@pytest.mark.unit
@pytest.mark.asyncio
async def test_get_property_photo_includes_owning_property(patched_client):
    patched_client.builder.execute.return_value = MagicMock(
        data=[{"id": "photo-1", "property_id": "prop-1", "storage_path": "prop-1/a.jpg"}]
    )

    photo = await get_property_photo("photo-1")

    assert photo["property_id"] == "prop-1"
    patched_client.table.assert_called_once_with("property_photos")
    select_columns = patched_client.builder.select.call_args.args[0]
    assert "property_id" in select_columns
    patched_client.builder.eq.assert_called_once_with("id", "photo-1")


@pytest.mark.unit
@pytest.mark.asyncio
async def test_get_property_photo_missing(patched_client):
    patched_client.builder.execute.return_value = MagicMock(data=[])

    assert await get_property_photo("photo-x") is None


@pytest.mark.unit
@pytest.mark.asyncio
async def test_query_failure_raises_supabase_error(patched_client):
    patched_client.builder.execute.side_effect = ConnectionError("reset by peer")

    with pytest.raises(SupabaseError, match="reset by peer"):
        await get_property_by_slug("casa-centro")


@pytest.mark.unit
@pytest.mark.asyncio
async def test_set_property_status_published(patched_client, freeze_time_fixture):
    await set_property_status("prop-1", "ativo", published=True)

    patched_client.builder.update.assert_called_once_with({
        "status": "ativo",
        "published_at": "2024-12-09T12:00:00+00:00",
    })
    patched_client.builder.eq.assert_called_once_with("id", "prop-1")


@pytest.mark.unit
@pytest.mark.asyncio
async def test_set_property_status_unpublished(patched_client):
    await set_property_status("prop-1", "inativo", published=False)

    patched_client.builder.update.assert_called_once_with({"status": "inativo", "published_at": None})


@pytest.mark.unit
@pytest.mark.asyncio
async def test_upload_object_never_overwrites(patched_client):
    bucket = patched_client.storage.from_.return_value

    await upload_object("prop-1/abc-sala.jpg", b"data", "image/jpeg")

    patched_client.storage.from_.assert_called_once_with(PHOTOS_BUCKET)
    bucket.upload.assert_called_once_with(
        "prop-1/abc-sala.jpg",
        b"data",
        {"upsert": "false", "cache-control": "3600", "content-type": "image/jpeg"},
    )


@pytest.mark.unit
@pytest.mark.asyncio
async def test_remove_objects_skips_empty(patched_client):
    await remove_objects([])

    patched_client.storage.from_.assert_not_called()


@pytest.mark.unit
def test_client_requires_credentials():
    with patch.object(supabase_client, "_client", None), \
         patch.dict('os.environ', {"SUPABASE_URL": "", "SUPABASE_SERVICE_ROLE_KEY": ""}):
        with pytest.raises(SupabaseError):
            supabase_client.get_supabase_client()
