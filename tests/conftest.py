"""Pytest fixtures and configuration"""

from decimal import Decimal
from typing import AsyncGenerator, Callable, List, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from billsplit.main import app
from billsplit.schemas.bill import BillItem, BillSession, Participant


@pytest_asyncio.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Create test client bound to the ASGI app"""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def make_item() -> Callable[..., BillItem]:
    """Factory for bill items"""
    counter = {"next": 0}

    def _make_item(
        unit_price: str,
        quantity: int = 1,
        assigned: Optional[List[str]] = None,
        name: Optional[str] = None,
    ) -> BillItem:
        counter["next"] += 1
        return BillItem(
            id=f"item-{counter['next']}",
            name=name or f"Item {counter['next']}",
            unit_price=Decimal(unit_price),
            quantity=quantity,
            assigned_participant_ids=assigned or [],
        )

    return _make_item


@pytest.fixture
def alice() -> Participant:
    return Participant(id="p-alice", name="Alice")


@pytest.fixture
def bob() -> Participant:
    return Participant(id="p-bob", name="Bob")


@pytest.fixture
def carol() -> Participant:
    return Participant(id="p-carol", name="Carol")


@pytest.fixture
def sample_receipt_payload() -> dict:
    """Receipt payload as returned by the extraction service"""
    return {
        "merchantName": "Luigi's Trattoria",
        "items": [
            {"name": "Margherita Pizza", "price": 18.0, "quantity": 1},
            {"name": "Caesar Salad", "price": "12.00", "quantity": 1},
            {"name": "Sparkling Water", "price": 5, "quantity": 2},
        ],
        "subtotal": 40.0,
        "tax": 4.0,
        "tip": 8.0,
        "total": 52.0,
        "currency": "usd",
        "confidence": 0.95,
    }


@pytest.fixture
def sample_session(make_item, alice, bob) -> BillSession:
    """Two participants, one individual item each and one shared item"""
    return BillSession(
        merchant_name="Luigi's Trattoria",
        items=[
            make_item("60.00", assigned=[alice.id], name="Steak"),
            make_item("20.00", assigned=[bob.id], name="Pasta"),
            make_item("20.00", assigned=[alice.id, bob.id], name="Wine"),
        ],
        participants=[alice, bob],
        subtotal=Decimal("100.00"),
        tax=Decimal("10.00"),
        tip=Decimal("5.00"),
        total=Decimal("115.00"),
    )
