"""Tests for resource endpoint groups."""

import asyncio
import json

import httpx
import pytest

from polar_client.errors import ErrorKind, InvalidArgumentError
from polar_client.resources import ExportFormat
from polar_client.testing import MockPolarAPI, build_test_client, create_error_response, create_mock_response


class _Api:
    """Routes ``(method, path)`` to canned responses and records requests."""

    def __init__(self, routes: dict[tuple[str, str], httpx.Response] | None = None):
        self.routes = routes or {}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.routes.get((request.method, request.url.path))
        if response is None:
            return create_error_response(404, detail="Not found", error="ResourceNotFound")
        return httpx.Response(response.status_code, headers=response.headers, content=response.content)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self):
        return json.loads(self.last.content)


@pytest.fixture
def api():
    return _Api()


@pytest.fixture
async def client(api):
    client = build_test_client(api)
    yield client
    await client.aclose()


class TestNotFoundConvention:
    @pytest.mark.unit
    async def test_get_missing_is_absent_success(self, client, api):
        result = await client.products.get("prod_missing")

        assert result.is_success
        assert result.value is None
        assert api.last.url.path == "/v1/products/prod_missing"

    @pytest.mark.unit
    async def test_get_existing(self, client, api):
        api.routes[("GET", "/v1/discounts/disc_1")] = create_mock_response(200, json={"id": "disc_1"})

        result = await client.discounts.get("disc_1")

        assert result.value == {"id": "disc_1"}

    @pytest.mark.unit
    async def test_update_missing_is_not_found_failure(self, client):
        result = await client.products.update("prod_missing", {"name": "x"})

        assert result.error.kind is ErrorKind.NOT_FOUND

    @pytest.mark.unit
    async def test_delete_missing_is_not_found_failure(self, client):
        result = await client.discounts.delete("disc_missing")

        assert result.error.kind is ErrorKind.NOT_FOUND

    @pytest.mark.unit
    async def test_action_on_missing_is_not_found_failure(self, client):
        result = await client.subscriptions.revoke("sub_missing")

        assert result.error.kind is ErrorKind.NOT_FOUND

    @pytest.mark.unit
    @pytest.mark.parametrize(
        ("family", "method", "argument"),
        [
            ("orders", "get_invoice", "ord_missing"),
            ("customers", "get_state", "cus_missing"),
            ("customers", "get_state_external", "user_missing"),
            ("customers", "get_balance", "cus_missing"),
            ("checkouts", "client_get", "secret_missing"),
        ],
    )
    async def test_single_object_reads_missing_are_absent(self, client, family, method, argument):
        result = await getattr(getattr(client, family), method)(argument)

        assert result.is_success
        assert result.value is None

    @pytest.mark.unit
    async def test_related_reads_skip_decoder(self, client, api):
        api.routes[("GET", "/v1/customers/cus_1/balance")] = create_mock_response(200, json={"balance": 0})

        customers = client.customers.with_decoder(lambda raw: raw["id"])

        assert (await customers.get_balance("cus_1")).value == {"balance": 0}

    @pytest.mark.unit
    async def test_collection_read_missing_is_failure(self, client):
        result = await client.meters.quantities("m_missing")

        assert result.error.kind is ErrorKind.NOT_FOUND

    @pytest.mark.unit
    async def test_get_other_failures_are_kept(self, client, api):
        api.routes[("GET", "/v1/orders/ord_1")] = create_error_response(401, detail="Invalid token")

        result = await client.orders.get("ord_1")

        assert result.error.kind is ErrorKind.AUTHENTICATION


class TestPreconditions:
    @pytest.mark.unit
    @pytest.mark.parametrize("resource_id", ["", "   "])
    async def test_empty_id_raises_before_request(self, client, api, resource_id):
        with pytest.raises(InvalidArgumentError) as exc_info:
            await client.products.get(resource_id)

        assert exc_info.value.argument == "resource_id"
        assert api.requests == []

    @pytest.mark.unit
    async def test_empty_body_raises(self, client, api):
        with pytest.raises(InvalidArgumentError):
            await client.products.create({})
        with pytest.raises(InvalidArgumentError):
            await client.customers.update("cus_1", {})

        assert api.requests == []

    @pytest.mark.unit
    async def test_named_argument_in_error(self, client):
        with pytest.raises(InvalidArgumentError) as exc_info:
            await client.orders.get_invoice("")

        assert exc_info.value.argument == "order_id"

    @pytest.mark.unit
    async def test_ids_are_quoted(self, client, api):
        await client.customers.get_external("user/42")

        assert api.last.url.raw_path == b"/v1/customers/external/user%2F42"


class TestCrud:
    @pytest.mark.unit
    async def test_create_attaches_idempotency_key(self, client, api):
        api.routes[("POST", "/v1/products/")] = create_mock_response(201, json={"id": "prod_1"})

        result = await client.products.create({"name": "Pro", "prices": []})

        assert result.value == {"id": "prod_1"}
        assert api.last.headers["Idempotency-Key"]
        assert api.last_json() == {"name": "Pro", "prices": []}

    @pytest.mark.unit
    async def test_create_retries_with_same_idempotency_key(self):
        responses = [create_mock_response(503), create_mock_response(201, json={"id": "chk_1"})]
        api = MockPolarAPI(fallback=lambda request: responses.pop(0))

        async with build_test_client(api) as client:
            result = await client.checkouts.create({"products": ["prod_1"]})

        keys = [r.headers["Idempotency-Key"] for r in api.requests]
        assert result.value == {"id": "chk_1"}
        assert len(keys) == 2
        assert keys[0] == keys[1]

    @pytest.mark.unit
    async def test_each_create_gets_new_key(self, client, api):
        api.routes[("POST", "/v1/discounts/")] = create_mock_response(201, json={})

        await client.discounts.create({"name": "a"})
        await client.discounts.create({"name": "b"})

        assert api.requests[0].headers["Idempotency-Key"] != api.requests[1].headers["Idempotency-Key"]

    @pytest.mark.unit
    async def test_explicit_idempotency_key(self, client, api):
        api.routes[("POST", "/v1/refunds/")] = create_mock_response(201, json={})

        await client.refunds.create({"order_id": "ord_1"}, idempotency_key="refund-ord_1")

        assert api.last.headers["Idempotency-Key"] == "refund-ord_1"

    @pytest.mark.unit
    async def test_update_uses_patch(self, client, api):
        api.routes[("PATCH", "/v1/meters/m_1")] = create_mock_response(200, json={"id": "m_1", "name": "API calls"})

        result = await client.meters.update("m_1", {"name": "API calls"})

        assert result.value["name"] == "API calls"
        assert api.last.method == "PATCH"

    @pytest.mark.unit
    async def test_delete_no_content(self, client, api):
        api.routes[("DELETE", "/v1/webhooks/endpoints/we_1")] = create_mock_response(204)

        result = await client.webhooks.delete("we_1")

        assert result.is_success
        assert result.value is None

    @pytest.mark.unit
    async def test_decoder(self, client, api):
        api.routes[("GET", "/v1/products/prod_1")] = create_mock_response(200, json={"id": "prod_1", "name": "Pro"})

        products = client.products.with_decoder(lambda raw: (raw["id"], raw["name"]))
        result = await products.get("prod_1")

        assert result.value == ("prod_1", "Pro")

    @pytest.mark.unit
    async def test_decoder_not_applied_to_absent(self, client):
        products = client.products.with_decoder(lambda raw: raw["id"])

        assert (await products.get("prod_missing")).value is None


class TestListing:
    @pytest.mark.unit
    async def test_list_and_list_all(self, products_client, products_api):
        page = (await products_client.products.list(limit=5)).unwrap()
        items = [r.unwrap() async for r in products_client.products.list_all(limit=5)]

        assert page.pagination.max_page == 3
        assert page.pagination.total_count == 12
        assert len(items) == 12

    @pytest.mark.unit
    async def test_end_to_end_pages(self, products_client):
        """Twelve items at limit=5: pages of 5/5/2 then an empty fourth page."""
        pages = [(await products_client.products.list(page=p, limit=5)).unwrap() for p in (1, 2, 3, 4)]

        assert [len(p.items) for p in pages] == [5, 5, 2, 0]

    @pytest.mark.unit
    async def test_query_filters(self, client, api):
        api.routes[("GET", "/v1/orders/")] = create_mock_response(200, json={"items": [], "pagination": {}})
        filters = client.orders.query().with_customer_id("cus_1").with_status("paid")

        await client.orders.list(filters=filters)

        params = api.last.url.params
        assert params["customer_id"] == "cus_1"
        assert params["status"] == "paid"
        assert params["page"] == "1"
        assert params["limit"] == "10"

    @pytest.mark.unit
    async def test_list_all_cancellation(self, products_client, products_api):
        cancel = asyncio.Event()
        cancel.set()

        results = [r async for r in products_client.products.list_all(cancel_event=cancel)]

        assert results[0].error.kind is ErrorKind.CANCELED
        assert products_api.requests == []

    @pytest.mark.unit
    async def test_benefit_grants(self):
        grants = [{"id": f"grant_{i}"} for i in range(3)]
        api = MockPolarAPI(items=grants, list_path="/v1/benefits/ben_1/grants/")

        async with build_test_client(api) as client:
            page = (await client.benefits.list_grants("ben_1", limit=2)).unwrap()
            everything = [r.unwrap() async for r in client.benefits.list_all_grants("ben_1", limit=2)]

        assert len(page.items) == 2
        assert everything == grants

    @pytest.mark.unit
    async def test_webhook_deliveries(self):
        api = MockPolarAPI(items=[{"id": "d1"}], list_path="/v1/webhooks/deliveries/")

        async with build_test_client(api) as client:
            page = (await client.webhooks.list_deliveries()).unwrap()

        assert page.items == ({"id": "d1"},)


class TestExport:
    @pytest.mark.unit
    async def test_get_export(self, client, api):
        api.routes[("GET", "/v1/products/export/")] = httpx.Response(200, text="id,name\n")

        result = await client.products.export(ExportFormat.CSV)

        assert result.value == "id,name\n"
        assert api.last.url.params["format"] == "csv"

    @pytest.mark.unit
    async def test_export_with_filters(self, client, api):
        api.routes[("GET", "/v1/orders/export/")] = create_mock_response(200, json=[])

        await client.orders.export("json", {"product_id": "prod_1"})

        assert api.last.url.params["format"] == "json"
        assert api.last.url.params["product_id"] == "prod_1"

    @pytest.mark.unit
    async def test_customers_export_is_post(self, client, api):
        api.routes[("POST", "/v1/customers/export/")] = create_mock_response(200, json={"url": "https://files"})

        result = await client.customers.export(ExportFormat.EXCEL, {"organization_id": "org_1"})

        assert result.value == {"url": "https://files"}
        assert api.last_json() == {"organization_id": "org_1", "format": "excel"}

    @pytest.mark.unit
    async def test_unknown_format_rejected(self, client):
        with pytest.raises(ValueError):
            await client.products.export("pdf")


class TestFamilyActions:
    @pytest.mark.unit
    async def test_product_archive_and_price(self, client, api):
        api.routes[("PATCH", "/v1/products/prod_1")] = create_mock_response(200, json={"is_archived": True})
        api.routes[("POST", "/v1/products/prod_1/prices/")] = create_mock_response(201, json={"id": "price_1"})

        archived = await client.products.archive("prod_1")
        archive_body = api.last_json()
        price = await client.products.create_price("prod_1", {"amount_type": "fixed", "price_amount": 1000})

        assert archived.value == {"is_archived": True}
        assert archive_body == {"is_archived": True}
        assert price.value == {"id": "price_1"}
        assert api.last.headers["Idempotency-Key"]

    @pytest.mark.unit
    async def test_customer_external_id_and_state(self, client, api):
        api.routes[("GET", "/v1/customers/external/user_42")] = create_mock_response(200, json={"id": "cus_1"})
        api.routes[("PATCH", "/v1/customers/external/user_42")] = create_mock_response(200, json={"id": "cus_1"})
        api.routes[("DELETE", "/v1/customers/external/user_42")] = create_mock_response(204)
        api.routes[("GET", "/v1/customers/cus_1/state")] = create_mock_response(200, json={"active_meters": []})
        api.routes[("GET", "/v1/customers/external/user_42/state")] = create_mock_response(200, json={})
        api.routes[("GET", "/v1/customers/cus_1/balance")] = create_mock_response(200, json={"balance": 0})

        assert (await client.customers.get_external("user_42")).value == {"id": "cus_1"}
        assert (await client.customers.update_external("user_42", {"name": "Ada"})).is_success
        assert (await client.customers.delete_external("user_42")).is_success
        assert (await client.customers.get_state("cus_1")).value == {"active_meters": []}
        assert (await client.customers.get_state_external("user_42")).value == {}
        assert (await client.customers.get_balance("cus_1")).value == {"balance": 0}
        assert (await client.customers.get_external("user_missing")).value is None

    @pytest.mark.unit
    async def test_order_invoice(self, client, api):
        api.routes[("POST", "/v1/orders/ord_1/generate_invoice")] = create_mock_response(202)

        generated = await client.orders.generate_invoice("ord_1")
        missing = await client.orders.get_invoice("ord_1")

        assert generated.is_success
        assert missing.is_success
        assert missing.value is None

    @pytest.mark.unit
    async def test_checkout_client_flow(self, client, api):
        base = "/v1/checkouts/client/secret_1"
        api.routes[("GET", base)] = create_mock_response(200, json={"status": "open"})
        api.routes[("PATCH", base)] = create_mock_response(200, json={"customer_email": "a@b.c"})
        api.routes[("POST", f"{base}/confirm")] = create_mock_response(200, json={"status": "confirmed"})

        assert (await client.checkouts.client_get("secret_1")).value == {"status": "open"}
        assert (await client.checkouts.client_update("secret_1", {"customer_email": "a@b.c"})).is_success
        confirmed = await client.checkouts.client_confirm("secret_1")

        assert confirmed.value == {"status": "confirmed"}
        assert api.last_json() == {}

    @pytest.mark.unit
    async def test_license_keys(self, client, api):
        api.routes[("POST", "/v1/license-keys/validate")] = create_mock_response(200, json={"status": "granted"})
        api.routes[("POST", "/v1/license-keys/lk_1/activate")] = create_mock_response(200, json={"id": "act_1"})
        api.routes[("POST", "/v1/license-keys/lk_1/deactivate")] = create_mock_response(204)

        validated = await client.license_keys.validate({"key": "ABC", "organization_id": "org_1"})
        activated = await client.license_keys.activate("lk_1", {"label": "laptop"})
        deactivated = await client.license_keys.deactivate("lk_1", {"activation_id": "act_1"})

        assert validated.value == {"status": "granted"}
        assert activated.value == {"id": "act_1"}
        assert deactivated.is_success

    @pytest.mark.unit
    async def test_event_ingest(self, client, api):
        api.routes[("POST", "/v1/events/ingest")] = create_mock_response(200, json={"inserted": 2})

        result = await client.events.ingest([{"name": "api_call"}, {"name": "api_call"}])

        assert result.value == {"inserted": 2}
        assert api.last_json() == {"events": [{"name": "api_call"}, {"name": "api_call"}]}
        with pytest.raises(InvalidArgumentError):
            await client.events.ingest([])

    @pytest.mark.unit
    async def test_meter_quantities(self, client, api):
        api.routes[("GET", "/v1/meters/m_1/quantities")] = create_mock_response(200, json={"quantities": []})

        result = await client.meters.quantities("m_1", {"interval": "day"})

        assert result.value == {"quantities": []}
        assert api.last.url.params["interval"] == "day"

    @pytest.mark.unit
    async def test_metrics(self, client, api):
        api.routes[("GET", "/v1/metrics/")] = create_mock_response(200, json={"periods": []})
        api.routes[("GET", "/v1/metrics/limits")] = create_mock_response(200, json={"min_date": "2024-01-01"})

        metrics = await client.metrics.get({"interval": "month"})
        limits = await client.metrics.limits()

        assert metrics.value == {"periods": []}
        assert limits.value == {"min_date": "2024-01-01"}

    @pytest.mark.unit
    async def test_customer_session_create(self, client, api):
        api.routes[("POST", "/v1/customer-sessions/")] = create_mock_response(201, json={"token": "cst_1"})

        result = await client.customer_sessions.create({"customer_id": "cus_1"})

        assert result.value == {"token": "cst_1"}

    @pytest.mark.unit
    async def test_seats(self, client, api):
        api.routes[("POST", "/v1/seats/assign")] = create_mock_response(200, json={"id": "seat_1"})
        api.routes[("POST", "/v1/seats/revoke")] = create_mock_response(200, json={"id": "seat_1"})
        api.routes[("POST", "/v1/seats/resend_invitation")] = create_mock_response(200, json={"id": "seat_1"})
        api.routes[("GET", "/v1/seats/claimed_subscriptions")] = create_mock_response(200, json=[{"id": "sub_1"}])

        assigned = await client.seats.assign({"subscription_id": "sub_1", "email": "a@b.c"})
        assign_body = api.last_json()
        await client.seats.revoke({"seat_id": "seat_1"})
        await client.seats.resend_invitation({"seat_id": "seat_1"})
        claimed = await client.seats.claimed_subscriptions()

        assert assigned.value == {"id": "seat_1"}
        assert assign_body == {"subscription_id": "sub_1", "email": "a@b.c"}
        assert [r.url.path for r in api.requests[1:3]] == ["/v1/seats/revoke", "/v1/seats/resend_invitation"]
        assert claimed.value == [{"id": "sub_1"}]

    @pytest.mark.unit
    async def test_seat_actions_require_body(self, client, api):
        with pytest.raises(InvalidArgumentError):
            await client.seats.assign({})
        with pytest.raises(InvalidArgumentError):
            await client.customer_seats.claim({})

        assert api.requests == []

    @pytest.mark.unit
    async def test_customer_seats(self, client, api):
        api.routes[("GET", "/v1/customer_seats/seat_1")] = create_mock_response(200, json={"id": "seat_1"})
        api.routes[("POST", "/v1/customer_seats/assign")] = create_mock_response(200, json={"id": "seat_2"})
        api.routes[("POST", "/v1/customer_seats/claim")] = create_mock_response(200, json={"id": "seat_2"})

        seat = await client.customer_seats.get("seat_1")
        assigned = await client.customer_seats.assign({"subscription_id": "sub_1", "email": "a@b.c"})
        claimed = await client.customer_seats.claim({"invitation_token": "inv_1"})
        claim_info = await client.customer_seats.claim_info()

        assert seat.value == {"id": "seat_1"}
        assert assigned.value == {"id": "seat_2"}
        assert claimed.value == {"id": "seat_2"}
        assert api.last.url.path == "/v1/customer_seats/claim_info"
        assert claim_info.value is None

    @pytest.mark.unit
    async def test_seat_listing(self):
        api = MockPolarAPI(items=[{"id": f"seat_{i}"} for i in range(3)], list_path="/v1/customer_seats/")

        async with build_test_client(api) as client:
            seats = [r.unwrap() async for r in client.customer_seats.list_all(limit=2)]

        assert [s["id"] for s in seats] == ["seat_0", "seat_1", "seat_2"]
        assert len(api.page_requests) == 2
