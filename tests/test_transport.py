from datetime import date

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from listquery.db import clear_db, init_db
from listquery.descriptor import DateRange, QueryDescriptor, SortDirection, SortSpec
from listquery.errors import NetworkError, QueryValidationError, ServerError
from listquery.main import app
from listquery.resources import RESOURCES, Actor, Role
from listquery.transport import ListTransport

ADMIN = Actor(role=Role.ADMIN, id="emp-108")
INVOICES = RESOURCES["invoices"]
PATIENTS = RESOURCES["patients"]
APPOINTMENTS = RESOURCES["appointments"]


def _mock(handler) -> ListTransport:
    client = AsyncClient(transport=httpx.MockTransport(handler), base_url="http://test")
    return ListTransport(client=client)


def _ok_page(content, total=None):
    return {
        "status": "success",
        "data": {"content": content, "page": 0, "size": 10, "totalElements": len(content) if total is None else total},
    }


# =============================================================================
# Against a mocked backend
# =============================================================================

class TestTransportMocked:

    @pytest.mark.asyncio
    async def test_request_carries_params_and_actor(self):
        seen = {}

        def handler(request: httpx.Request):
            seen["path"] = request.url.path
            seen["params"] = dict(request.url.params)
            seen["role"] = request.headers.get("X-Actor-Role")
            seen["actor"] = request.headers.get("X-Actor-Id")
            return httpx.Response(200, json=_ok_page([]))

        d = QueryDescriptor(
            page=1,
            size=20,
            filters={"status": "UNPAID"},
            sort=SortSpec(field="totalAmount", direction=SortDirection.DESC),
        )
        async with _mock(handler) as transport:
            await transport.fetch(INVOICES, d, ADMIN)

        assert seen["path"] == "/api/billing/invoices"
        assert seen["params"] == {"page": "1", "size": "20", "sort": "totalAmount,desc", "status": "UNPAID"}
        assert seen["role"] == "admin"
        assert seen["actor"] == "emp-108"

    @pytest.mark.asyncio
    async def test_successful_response_is_normalized(self):
        def handler(request):
            return httpx.Response(200, json=_ok_page([{"id": "inv1", "patient": {"fullName": "Anna"}, "balance": 3}], total=21))

        async with _mock(handler) as transport:
            env = await transport.fetch(INVOICES, QueryDescriptor(), ADMIN)
        assert env.total_pages == 3
        assert env.content[0]["patientName"] == "Anna"
        assert env.content[0]["balanceDue"] == 3

    @pytest.mark.asyncio
    async def test_connection_failure_is_network_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with _mock(handler) as transport:
            with pytest.raises(NetworkError):
                await transport.fetch(INVOICES, QueryDescriptor(), ADMIN)

    @pytest.mark.asyncio
    async def test_timeout_is_network_error(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        async with _mock(handler) as transport:
            with pytest.raises(NetworkError) as exc_info:
                await transport.fetch(INVOICES, QueryDescriptor(), ADMIN)
        assert "timed out" in exc_info.value.message

    @pytest.mark.parametrize(
        "status,body,message,code",
        [
            (500, {"status": "error", "error": {"code": "BOOM", "message": "Database exploded"}}, "Database exploded", "BOOM"),
            (403, {"detail": "Not allowed"}, "Not allowed", None),
            (404, {"message": "No such list"}, "No such list", None),
            (502, None, "The server could not complete the request.", None),
        ],
    )
    @pytest.mark.asyncio
    async def test_failure_status_is_server_error(self, status, body, message, code):
        def handler(request):
            if body is None:
                return httpx.Response(status, text="<html>Bad Gateway</html>")
            return httpx.Response(status, json=body)

        async with _mock(handler) as transport:
            with pytest.raises(ServerError) as exc_info:
                await transport.fetch(INVOICES, QueryDescriptor(), ADMIN)
        err = exc_info.value
        assert err.status_code == status
        assert err.message == message
        assert err.error_code == code

    @pytest.mark.asyncio
    async def test_invalid_json_is_server_error(self):
        def handler(request):
            return httpx.Response(200, text="not json")

        async with _mock(handler) as transport:
            with pytest.raises(ServerError):
                await transport.fetch(INVOICES, QueryDescriptor(), ADMIN)

    @pytest.mark.asyncio
    async def test_malformed_body_is_server_error(self):
        def handler(request):
            return httpx.Response(200, json={"status": "success", "data": {"items": []}})

        async with _mock(handler) as transport:
            with pytest.raises(ServerError):
                await transport.fetch(INVOICES, QueryDescriptor(), ADMIN)

    @pytest.mark.asyncio
    async def test_invalid_filter_is_rejected_before_sending(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json=_ok_page([]))

        async with _mock(handler) as transport:
            with pytest.raises(QueryValidationError):
                await transport.fetch(INVOICES, QueryDescriptor(filters={"ward": "A"}), ADMIN)
        assert calls == []

    @pytest.mark.asyncio
    async def test_no_retry_after_failure(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(503, json={"detail": "busy"})

        async with _mock(handler) as transport:
            with pytest.raises(ServerError):
                await transport.fetch(INVOICES, QueryDescriptor(), ADMIN)
        assert len(calls) == 1


# =============================================================================
# Against the service itself
# =============================================================================

class TestTransportAgainstService:

    @pytest.fixture(autouse=True)
    def setup_db(self):
        init_db(seed=True)
        yield
        clear_db()

    @pytest_asyncio.fixture
    async def transport(self):
        client = AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
        async with ListTransport(client=client) as t:
            yield t
        await client.aclose()

    @pytest.mark.asyncio
    async def test_patients_round_trip(self, transport):
        d = QueryDescriptor(date_range=DateRange(start=date(2025, 1, 31), end=date(2025, 1, 31)))
        env = await transport.fetch(PATIENTS, d, ADMIN)
        assert [p["fullName"] for p in env.content] == ["Anna Nguyen"]

    @pytest.mark.asyncio
    async def test_appointments_round_trip_through_rsql(self, transport):
        d = QueryDescriptor(filters={"doctorId": "emp-101"}, search="khanh")
        env = await transport.fetch(APPOINTMENTS, d, Actor(role=Role.NURSE))
        assert [a["id"] for a in env.content] == ["apt006"]

    @pytest.mark.asyncio
    async def test_appointment_search_with_semicolon(self, transport):
        env = await transport.fetch(APPOINTMENTS, QueryDescriptor(search="khanh;"), ADMIN)
        assert env.is_empty

    @pytest.mark.asyncio
    async def test_forbidden_role_surfaces_server_error(self, transport):
        with pytest.raises(ServerError) as exc_info:
            await transport.fetch(RESOURCES["employees"], QueryDescriptor(), Actor(role=Role.NURSE))
        assert exc_info.value.status_code == 403
        assert exc_info.value.error_code == "FORBIDDEN"

    @pytest.mark.asyncio
    async def test_lab_orders_are_paged_client_side(self, transport):
        env = await transport.fetch(RESOURCES["lab-orders"], QueryDescriptor(size=2, page=2), Actor(role=Role.LAB))
        assert env.total_elements == 5
        assert env.last is True
        assert len(env.content) == 1
