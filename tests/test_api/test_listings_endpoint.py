"""Tests for the listings search endpoint."""

import pytest
from unittest.mock import patch
from api.listings import handler
from src.models.search import PagedResult
from src.services.query_executor import execute
from src.utils.errors import StoreUnavailable
from tests.utils.assertions import assert_valid_response
from tests.utils.helpers import create_vercel_request, response_json


@pytest.fixture
def patched_execute(memory_store):
    """Route the endpoint to the in-memory catalogue."""
    async def _execute(filters):
        return await execute(filters, store=memory_store)

    with patch('api.listings.execute', side_effect=_execute) as mock_execute:
        yield mock_execute


@pytest.mark.unit
def test_listings_search(patched_execute):
    request = create_vercel_request("/aluguel/barreiras", {"minPrice": "1500", "sort": "price_desc"})

    response = handler(request)

    assert_valid_response(response, 200)
    body = response_json(response)
    assert [item["id"] for item in body["items"]] == ["p-casa-aluguel"]
    assert body["total"] == 1
    assert body["page"] == 1
    assert body["total_pages"] == 1
    assert body["filters"]["purpose"] == "aluguel"
    assert body["filters"]["city"] == "Barreiras"
    assert body["query"] == {"purpose": "aluguel", "city": "Barreiras", "minPrice": "1500", "sort": "price_desc"}
    assert body["canonical_path"] == "/aluguel/barreiras"


@pytest.mark.unit
def test_listings_path_wins_over_query(patched_execute):
    request = create_vercel_request("/venda/todos/casas", {"purpose": "aluguel", "type": "apartamento"})

    body = response_json(handler(request))

    assert [item["id"] for item in body["items"]] == ["p-casa-venda"]
    assert body["canonical_path"] == "/venda/todos/casas"


@pytest.mark.unit
def test_listings_malformed_values_are_ignored(patched_execute):
    request = create_vercel_request("/imoveis", {"bedrooms": "abc", "minPrice": "0", "page": "-1"})

    response = handler(request)

    assert_valid_response(response, 200)
    body = response_json(response)
    assert body["total"] == 5
    assert body["query"] == {}
    assert body["canonical_path"] == "/imoveis"


@pytest.mark.unit
def test_listings_store_unavailable():
    with patch('api.listings.execute', side_effect=StoreUnavailable("down")):
        response = handler(create_vercel_request())

    assert response["statusCode"] == 503
    assert response_json(response) == {"error": "Erro ao carregar listagens."}


@pytest.mark.unit
def test_listings_unexpected_error():
    with patch('api.listings.execute', side_effect=RuntimeError("boom")):
        response = handler(create_vercel_request())

    assert response["statusCode"] == 500


@pytest.mark.unit
def test_listings_passes_canonical_filters():
    async def _empty(filters):
        return PagedResult(items=[], total=0, page=filters.page, page_size=filters.page_size)

    with patch('api.listings.execute', side_effect=_empty) as mock_execute:
        handler(create_vercel_request("/lancamentos/vitoria-da-conquista", {"page": "2"}))

    filters = mock_execute.call_args[0][0]
    assert filters.purpose.value == "lancamento"
    assert filters.city == "Vitória da Conquista"
    assert filters.page == 2
