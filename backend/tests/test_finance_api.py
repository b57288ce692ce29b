"""
Tests for the Finance API endpoints.
"""
import json
import pytest
from decimal import Decimal
from httpx import AsyncClient

from churchledger.api.v1.finance.transactions import stream_transactions
from churchledger.models.church import Church
from churchledger.models.member import Member
from churchledger.services.feed import transaction_feed
from churchledger.services.transaction_store import TransactionStore

API = "/api/v1/finance"


def entry_payload(**overrides) -> dict:
    payload = {
        "amount": "300.00",
        "occurred_at": "2024-05-10T12:00:00Z",
        "category": "dizimo",
        "payment_method": "pix",
    }
    payload.update(overrides)
    return payload


def expense_payload(**overrides) -> dict:
    payload = {
        "amount": "120.00",
        "occurred_at": "2024-05-15T09:00:00Z",
        "category": "Outra Saída",
    }
    payload.update(overrides)
    return payload


class TestEntries:
    """Test entry endpoints."""

    @pytest.mark.asyncio
    async def test_create_entry(
        self, client: AsyncClient, auth_headers: dict, test_church: Church, test_member: Member
    ):
        """Test creating a tithe normalizes it and fills the member's tithes."""
        response = await client.post(
            f"{API}/entries",
            params={"church_id": test_church.id},
            json=entry_payload(member_id=test_member.id),
            headers=auth_headers
        )
        assert response.status_code == 201
        data = response.json()
        assert data["tipo"] == "entrada"
        assert data["category"] == "Dízimo"
        assert data["payment_method"] == "PIX"
        assert data["member_name"] == "João Silva"
        assert data["version"] == 1
        assert Decimal(data["amount"]) == Decimal("300")

        tithes = await client.get(
            f"/api/v1/membership/members/{test_member.id}/tithes",
            params={"church_id": test_church.id},
            headers=auth_headers
        )
        assert tithes.status_code == 200
        body = tithes.json()
        assert body["totalItems"] == 1
        assert body["items"][0]["transaction_id"] == data["id"]
        assert Decimal(body["total_amount"]) == Decimal("300")

    @pytest.mark.asyncio
    async def test_create_entry_validation(self, client: AsyncClient, auth_headers: dict, test_church: Church):
        response = await client.post(
            f"{API}/entries",
            params={"church_id": test_church.id},
            json=entry_payload(amount="-1.00"),
            headers=auth_headers
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_update_entry(self, client: AsyncClient, auth_headers: dict, test_church: Church):
        created = await client.post(
            f"{API}/entries", params={"church_id": test_church.id},
            json=entry_payload(category="oferta"), headers=auth_headers
        )
        tid = created.json()["id"]

        response = await client.patch(
            f"{API}/entries/{tid}",
            params={"church_id": test_church.id},
            json={"version": 1, "amount": "350.00", "description": "culto"},
            headers=auth_headers
        )
        assert response.status_code == 200
        data = response.json()
        assert Decimal(data["amount"]) == Decimal("350")
        assert data["description"] == "culto"
        assert data["version"] == 2

    @pytest.mark.asyncio
    async def test_update_entry_stale_version(self, client: AsyncClient, auth_headers: dict, test_church: Church):
        created = await client.post(
            f"{API}/entries", params={"church_id": test_church.id},
            json=entry_payload(), headers=auth_headers
        )
        tid = created.json()["id"]
        await client.patch(
            f"{API}/entries/{tid}", params={"church_id": test_church.id},
            json={"version": 1, "amount": "1.00"}, headers=auth_headers
        )

        response = await client.patch(
            f"{API}/entries/{tid}", params={"church_id": test_church.id},
            json={"version": 1, "amount": "2.00"}, headers=auth_headers
        )
        assert response.status_code == 409
        assert response.json()["current_version"] == 2

    @pytest.mark.asyncio
    async def test_update_expense_through_entry_route(
        self, client: AsyncClient, auth_headers: dict, test_church: Church
    ):
        created = await client.post(
            f"{API}/expenses", params={"church_id": test_church.id},
            json=expense_payload(), headers=auth_headers
        )
        response = await client.patch(
            f"{API}/entries/{created.json()['id']}", params={"church_id": test_church.id},
            json={"version": 1, "amount": "2.00"}, headers=auth_headers
        )
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_delete_entry(
        self, client: AsyncClient, auth_headers: dict, test_church: Church, test_member: Member
    ):
        created = await client.post(
            f"{API}/entries", params={"church_id": test_church.id},
            json=entry_payload(member_id=test_member.id), headers=auth_headers
        )
        tid = created.json()["id"]

        response = await client.delete(
            f"{API}/entries/{tid}", params={"church_id": test_church.id, "version": 1},
            headers=auth_headers
        )
        assert response.status_code == 204

        missing = await client.get(
            f"{API}/transactions/{tid}", params={"church_id": test_church.id}, headers=auth_headers
        )
        assert missing.status_code == 404

        tithes = await client.get(
            f"/api/v1/membership/members/{test_member.id}/tithes",
            params={"church_id": test_church.id},
            headers=auth_headers
        )
        assert tithes.json()["totalItems"] == 0

    @pytest.mark.asyncio
    async def test_delete_missing_entry(self, client: AsyncClient, auth_headers: dict, test_church: Church):
        response = await client.delete(
            f"{API}/entries/doesnotexist123", params={"church_id": test_church.id},
            headers=auth_headers
        )
        assert response.status_code == 404


class TestExpenses:
    """Test expense endpoints."""

    @pytest.mark.asyncio
    async def test_expense_lifecycle(self, client: AsyncClient, auth_headers: dict, test_church: Church):
        created = await client.post(
            f"{API}/expenses", params={"church_id": test_church.id},
            json=expense_payload(main_category="despesas fixas"), headers=auth_headers
        )
        assert created.status_code == 201
        data = created.json()
        assert data["tipo"] == "saida"
        assert data["main_category"] == "Despesas fixas"

        updated = await client.patch(
            f"{API}/expenses/{data['id']}", params={"church_id": test_church.id},
            json={"version": 1, "amount": "99.90"}, headers=auth_headers
        )
        assert updated.status_code == 200
        assert Decimal(updated.json()["amount"]) == Decimal("99.90")

        deleted = await client.delete(
            f"{API}/expenses/{data['id']}", params={"church_id": test_church.id},
            headers=auth_headers
        )
        assert deleted.status_code == 204


class TestListing:
    """Test listing, balances and categories."""

    @pytest.mark.asyncio
    async def test_list_by_month(self, client: AsyncClient, auth_headers: dict, test_church: Church):
        params = {"church_id": test_church.id}
        await client.post(f"{API}/entries", params=params, json=entry_payload(), headers=auth_headers)
        await client.post(f"{API}/expenses", params=params, json=expense_payload(), headers=auth_headers)
        await client.post(
            f"{API}/entries", params=params,
            json=entry_payload(amount="50.00", category="Oferta", occurred_at="2024-04-02T10:00:00Z"),
            headers=auth_headers
        )

        may = await client.get(
            f"{API}/transactions", params={**params, "year": 2024, "month": 5}, headers=auth_headers
        )
        assert may.status_code == 200
        data = may.json()
        assert data["totalItems"] == 2
        assert [t["tipo"] for t in data["items"]] == ["saida", "entrada"]

        everything = await client.get(f"{API}/transactions", params=params, headers=auth_headers)
        assert everything.json()["totalItems"] == 3

    @pytest.mark.asyncio
    async def test_balances(self, client: AsyncClient, auth_headers: dict, test_church: Church):
        params = {"church_id": test_church.id}
        await client.post(f"{API}/entries", params=params, json=entry_payload(), headers=auth_headers)
        await client.post(f"{API}/expenses", params=params, json=expense_payload(), headers=auth_headers)
        await client.post(
            f"{API}/entries", params=params,
            json=entry_payload(amount="50.00", category="Oferta", occurred_at="2024-04-02T10:00:00Z"),
            headers=auth_headers
        )

        response = await client.get(
            f"{API}/balances", params={**params, "year": 2024, "month": 5}, headers=auth_headers
        )
        assert response.status_code == 200
        data = response.json()
        assert data["currency"] == "BRL"
        assert (data["year"], data["month"]) == (2024, 5)
        assert Decimal(data["period_income"]) == Decimal("300")
        assert Decimal(data["period_expense"]) == Decimal("120")
        assert Decimal(data["period_net"]) == Decimal("180")
        assert Decimal(data["aggregate_balance"]) == Decimal("230")
        assert [(s["category"], s["percent"]) for s in data["income_distribution"]] == [("Dízimo", 100)]

    @pytest.mark.asyncio
    async def test_categories(self, client: AsyncClient, auth_headers: dict):
        response = await client.get(f"{API}/categories", headers=auth_headers)
        assert response.status_code == 200
        data = response.json()
        assert "Dízimo" in data["entry_categories"]
        assert "PIX" in data["payment_methods"]
        assert "Outra Saída" in data["expense_categories"]


class ClientConnection:
    """Stands in for the Request the stream polls; disconnects after ``polls`` checks."""

    def __init__(self, polls: int):
        self.polls = polls

    async def is_disconnected(self) -> bool:
        self.polls -= 1
        return self.polls < 0


class TestStream:
    """Test the NDJSON live feed.

    The route is driven through its body iterator: the in-process ASGI
    transport only returns a response once the app has finished sending it.
    """

    @pytest.mark.asyncio
    async def test_snapshot_lines(
        self, client: AsyncClient, auth_headers: dict, db_session, test_church: Church, tenant_session
    ):
        church_id = test_church.id
        store = TransactionStore(db_session, church_id, tenant_session)
        response = await stream_transactions(ClientConnection(polls=2), store=store)
        assert response.media_type == "application/x-ndjson"
        assert transaction_feed.subscriber_count(church_id) == 1

        lines = response.body_iterator
        first = json.loads(await lines.__anext__())
        assert first == {"totalItems": 0, "items": []}

        created = await client.post(
            f"{API}/entries", params={"church_id": church_id},
            json=entry_payload(), headers=auth_headers
        )
        assert created.status_code == 201

        second = json.loads(await lines.__anext__())
        assert second["totalItems"] == 1
        assert second["items"][0]["id"] == created.json()["id"]
        assert second["items"][0]["category"] == "Dízimo"

        # Third poll reports the client gone
        with pytest.raises(StopAsyncIteration):
            await lines.__anext__()
        assert transaction_feed.subscriber_count(church_id) == 0

    @pytest.mark.asyncio
    async def test_closing_stream_unsubscribes(self, db_session, test_church: Church, tenant_session):
        church_id = test_church.id
        store = TransactionStore(db_session, church_id, tenant_session)
        response = await stream_transactions(ClientConnection(polls=10), store=store)

        lines = response.body_iterator
        await lines.__anext__()
        await lines.aclose()

        assert transaction_feed.subscriber_count(church_id) == 0

    @pytest.mark.asyncio
    async def test_stream_requires_token(self, client: AsyncClient, test_church: Church):
        response = await client.get(f"{API}/transactions/stream", params={"church_id": test_church.id})
        assert response.status_code == 401


class TestAccess:
    """Test authentication and church roles."""

    @pytest.mark.asyncio
    async def test_requires_token(self, client: AsyncClient, test_church: Church):
        response = await client.get(f"{API}/transactions", params={"church_id": test_church.id})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_viewer_can_read_not_write(self, client: AsyncClient, viewer_headers: dict, test_church: Church):
        params = {"church_id": test_church.id}
        listed = await client.get(f"{API}/transactions", params=params, headers=viewer_headers)
        assert listed.status_code == 200

        created = await client.post(f"{API}/entries", params=params, json=entry_payload(), headers=viewer_headers)
        assert created.status_code == 403

    @pytest.mark.asyncio
    async def test_non_member_is_forbidden(self, client: AsyncClient, auth_headers: dict, db_session):
        other = Church(name="Outra Igreja", currency="BRL")
        db_session.add(other)
        await db_session.commit()

        response = await client.get(f"{API}/transactions", params={"church_id": other.id}, headers=auth_headers)
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_unknown_church(self, client: AsyncClient, auth_headers: dict):
        response = await client.get(
            f"{API}/transactions", params={"church_id": "nosuchchurch123"}, headers=auth_headers
        )
        assert response.status_code == 404
