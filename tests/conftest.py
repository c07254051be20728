from __future__ import annotations

from typing import Generator

import pytest
from fastapi.testclient import TestClient

from order_desk.core.session import CheckoutSessionManager
from order_desk.database.orders import InMemoryOrderSink
from order_desk.database.products import ProductDatabase
from order_desk.main import app
from order_desk.models.product import PackSizeOffer, Product
from order_desk.routes.checkout import get_order_sink, get_session_manager
from order_desk.routes.products import get_product_db
from order_desk.services.checkout import CheckoutWorkflow


@pytest.fixture
def product() -> Product:
    return Product(
        slug="hydraulic-oil-iso-46",
        title="Hydraulic Oil ISO 46",
        pack_sizes=[
            PackSizeOffer(label="5L", sku="HYD-5", price="Call for pricing"),
            PackSizeOffer(label="20L", sku="HYD-20"),
            PackSizeOffer(label="IBC 600L", sku="HYD-600"),
        ],
        unavailable_pack_sizes=["1L"],
    )


@pytest.fixture
def order_sink() -> InMemoryOrderSink:
    return InMemoryOrderSink()


@pytest.fixture
def workflow(product, order_sink) -> CheckoutWorkflow:
    return CheckoutWorkflow(product=product, order_sink=order_sink, submit_timeout=1.0)


@pytest.fixture
def client(product, order_sink) -> Generator[TestClient, None, None]:
    """TestClient wired to an isolated session manager, catalogue and sink."""
    manager = CheckoutSessionManager()
    products = ProductDatabase({product.slug: product})

    app.dependency_overrides[get_order_sink] = lambda: order_sink
    app.dependency_overrides[get_session_manager] = lambda: manager
    app.dependency_overrides[get_product_db] = lambda: products
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
