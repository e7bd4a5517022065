"""Shared test fixtures."""
import asyncio

import pytest

from account_console.console import AccountConsole
from account_console.gateway import MemoryGateway, PhotoFile, SessionContext
from account_console.notifications import MemoryNotificationSink
from account_console.profile.schema import PaymentMethod

USER_ID = "user-1"


class GatedGateway(MemoryGateway):
    """MemoryGateway whose uploads and updates can be held open by a test."""

    def __init__(self, records):
        super().__init__(records)
        self.hold_uploads = False
        self.hold_updates = False
        self.entered = asyncio.Event()
        self.release = asyncio.Event()

    async def _wait(self):
        self.entered.set()
        await self.release.wait()

    async def upload_photo(self, session, file, owner_id):
        if self.hold_uploads:
            await self._wait()
        return await super().upload_photo(session, file, owner_id)

    async def update_profile(self, session, partial):
        if self.hold_updates:
            await self._wait()
        return await super().update_profile(session, partial)


@pytest.fixture
def sample_record():
    return {
        "id": USER_ID,
        "name": "Ada Lovelace",
        "email": "ada@example.com",
        "phone": "415-555-0100",
        "bio": "Analytical engines",
        "photo": None,
        "paymentMethods": [
            {"id": "1", "brand": "visa", "last4": "4242", "expMonth": 12, "expYear": 2030, "isDefault": True},
            {"id": "2", "brand": "mastercard", "last4": "8899", "expMonth": 6, "expYear": 2029, "isDefault": False},
        ],
    }


@pytest.fixture
def session():
    return SessionContext(user_id=USER_ID, access_token="tok_abc", email="ada@example.com")


@pytest.fixture
def gateway(sample_record):
    return GatedGateway({USER_ID: sample_record})


@pytest.fixture
def sink():
    return MemoryNotificationSink()


@pytest.fixture
def console(gateway, session, sink):
    return AccountConsole(gateway, session, sink)


@pytest.fixture
def visa_card():
    return PaymentMethod(id="3", brand="visa", last4="1111", exp_month=1, exp_year=2031)


@pytest.fixture
def png_photo():
    return PhotoFile(filename="me.png", mime_type="image/png", data=b"\x89PNG" + b"\x00" * 64)
