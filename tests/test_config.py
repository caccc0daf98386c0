"""Tests for settings and dependency wiring."""

from unittest.mock import patch

from crm_assistant.api import dependencies
from crm_assistant.clients import BusinessDataSource, CachedListingSource
from crm_assistant.core.config import Settings


def test_defaults() -> None:
    settings = Settings(_env_file=None)

    assert settings.source_timeout == 15.0
    assert settings.gemini_model == "gemini-2.0-flash-exp"
    assert settings.partners_cache_key == "parceiros:list:1:50:::"
    assert settings.products_cache_key == "produtos:list:all"
    assert (settings.leads_cap, settings.partners_cap, settings.products_cap, settings.orders_cap) == (15, 15, 20, 10)


def test_env_prefix(monkeypatch) -> None:
    monkeypatch.setenv("CRM_ASSISTANT_SOURCE_TIMEOUT", "3.5")
    monkeypatch.setenv("CRM_ASSISTANT_ORDERS_CAP", "4")
    monkeypatch.setenv("CRM_ASSISTANT_BUSINESS_API_URL", "http://crm.internal")

    settings = Settings(_env_file=None)

    assert settings.source_timeout == 3.5
    assert settings.orders_cap == 4
    assert settings.business_api_url == "http://crm.internal"


def test_aggregation_service_wiring() -> None:
    """Leads and orders come from the business API, partners and products from the cache."""
    settings = Settings(_env_file=None, business_api_url="http://crm.internal", orders_cap=4)
    dependencies.get_aggregation_service.cache_clear()
    try:
        with patch.object(dependencies, "get_settings", return_value=settings):
            service = dependencies.get_aggregation_service()
    finally:
        dependencies.get_aggregation_service.cache_clear()

    leads = service.sources["leads"]
    orders = service.sources["orders"]
    assert isinstance(leads, BusinessDataSource)
    assert leads.url == "http://crm.internal/api/leads"
    assert isinstance(orders, BusinessDataSource)
    assert orders.url == "http://crm.internal/api/sankhya/pedidos/listar"
    assert isinstance(service.sources["partners"], CachedListingSource)
    assert service.sources["partners"].list_field == "parceiros"
    assert service.sources["products"].list_field == "produtos"
    assert service.caps["orders"] == 4
    assert service.max_deadline == 15.0
