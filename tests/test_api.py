import httpx
import pytest
from combinators import RetryPolicy
from kungfu import Ok, Error

from kiosk import messages as M
from kiosk.api import ApiError, ApiErrorKind, OrderApi, to_api_error
from kiosk.auth import AuthState
from kiosk.cart import Cart

from conftest import API_URL


@pytest.fixture
def auth() -> AuthState:
    return AuthState("tok-booth-7")


@pytest.fixture
async def api(transport, auth):
    client = OrderApi.create(API_URL, auth=auth, transport=transport)
    yield client
    await client.aclose()


async def test_login_is_unsigned(transport, server):
    api = OrderApi.create(API_URL, auth=AuthState("stale"), transport=transport)
    match await api.login("booth-7", "secret"):
        case Ok(result):
            assert result.access_token == "tok-booth-7"
        case Error(e):
            pytest.fail(e.message)
    assert server.requests[-1] == ("POST", "/kiosks/login", {"username": "booth-7", "password": "secret"}, None)
    await api.aclose()


async def test_login_rejection_carries_code(transport):
    api = OrderApi.create(API_URL, transport=transport)
    match await api.login("booth-7", "wrong"):
        case Error(e):
            assert e.kind is ApiErrorKind.HTTP
            assert e.code == "BOOTH_PASSWORD_NOT_MATCH"
            assert e.status == 400
            assert e.user_message(M.LOGIN_ERRORS, M.LOGIN_FAILED) == "The password is incorrect."
        case Ok(_):
            pytest.fail("login accepted")
    await api.aclose()


async def test_create_order_sends_camel_case_items(api, server):
    cart = Cart().add_item(1, 1000).add_item(1, 1000).add_item(2, 500)
    match await api.create_order(cart.lines):
        case Ok(created):
            assert created.id == "100"
        case Error(e):
            pytest.fail(e.message)

    method, path, body, authorization = server.requests[-1]
    assert (method, path) == ("POST", "/orders")
    assert body == {"items": [{"productId": 1, "quantity": 2}, {"productId": 2, "quantity": 1}]}
    assert authorization == "Bearer tok-booth-7"


async def test_code_payment_parses_request(api, server):
    match await api.create_code_payment("100"):
        case Ok(created):
            assert created.id == "100"
            assert created.token == "kiosk://pay/100"
            assert created.expires_at is not None
            assert created.expires_at.year == 2030
        case Error(e):
            pytest.fail(e.message)
    assert server.requests[-1][2] == {"orderId": 100}


async def test_identifier_payment_without_expiry(api, server):
    match await api.create_identifier_payment("100", "2314"):
        case Ok(created):
            assert created.token is None
            assert created.expires_at is None
        case Error(e):
            pytest.fail(e.message)
    assert server.requests[-1][2] == {"orderId": 100, "studentId": "2314"}


async def test_identifier_payment_not_found(api):
    match await api.create_identifier_payment("100", "1101"):
        case Error(e):
            assert e.code == "USER_NOT_FOUND"
            assert e.user_message(M.PAYMENT_ERRORS, M.IDENTIFIER_FAILED) == M.PAYMENT_ERRORS["USER_NOT_FOUND"]
        case Ok(_):
            pytest.fail("unknown student accepted")


async def test_cancel_then_code_payment_is_not_pending(api, server):
    assert await api.cancel_order("100") == Ok(None)
    assert 100 in server.cancelled

    match await api.create_code_payment("100"):
        case Error(e):
            assert e.code == "ORDER_NOT_PENDING"
            assert e.message == "not pending"
            assert e.status == 409
        case Ok(_):
            pytest.fail("cancelled order accepted a payment")


async def test_unauthorized_signs_out_and_notifies(transport, server):
    auth = AuthState("expired")
    hits = []
    api = OrderApi.create(API_URL, auth=auth, on_unauthorized=lambda: hits.append(1), transport=transport)

    match await api.cancel_order("100"):
        case Error(e):
            assert e.kind is ApiErrorKind.UNAUTHORIZED
            assert e.status == 401
        case Ok(_):
            pytest.fail("expired token accepted")

    assert hits == [1]
    assert not auth.is_authenticated
    assert server.cancelled == set()
    await api.aclose()


async def test_failed_login_does_not_trigger_unauthorized_hook():
    hits = []

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"code": "BOOTH_NOT_APPROVED"})

    auth = AuthState("kept")
    api = OrderApi.create(
        API_URL,
        auth=auth,
        on_unauthorized=lambda: hits.append(1),
        transport=httpx.MockTransport(handler),
    )
    match await api.login("booth-7", "secret"):
        case Error(e):
            assert e.code == "BOOTH_NOT_APPROVED"
        case Ok(_):
            pytest.fail("login accepted")
    assert hits == []
    assert auth.token == "kept"
    await api.aclose()


async def test_products_retry_transient_failures():
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request.url.path)
        if len(attempts) < 3:
            raise httpx.ConnectError("refused", request=request)
        return httpx.Response(200, json=[{"id": 1, "name": "Iced Tea", "price": 1000, "stock": 4}])

    client = httpx.AsyncClient(base_url=API_URL, transport=httpx.MockTransport(handler))
    api = OrderApi(client, read_retry=RetryPolicy.fixed(times=3, retry_on=lambda e: e.is_transient))

    match await api.list_available_products():
        case Ok(products):
            assert [p.name for p in products] == ["Iced Tea"]
            assert products[0].stock == 4
        case Error(e):
            pytest.fail(e.message)
    assert attempts == ["/products/available"] * 3
    await api.aclose()


async def test_products_do_not_retry_http_errors():
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(1)
        return httpx.Response(500, json={"code": "BOOM"})

    client = httpx.AsyncClient(base_url=API_URL, transport=httpx.MockTransport(handler))
    api = OrderApi(client, read_retry=RetryPolicy.fixed(times=3, retry_on=lambda e: e.is_transient))

    match await api.list_available_products():
        case Error(e):
            assert e.kind is ApiErrorKind.HTTP
            assert e.code == "BOOM"
        case Ok(_):
            pytest.fail("500 accepted")
    assert attempts == [1]
    await api.aclose()


# Error mapping

def _status_error(status: int, **kwargs) -> httpx.HTTPStatusError:
    request = httpx.Request("POST", f"{API_URL}/orders")
    response = httpx.Response(status, request=request, **kwargs)
    return httpx.HTTPStatusError("failed", request=request, response=response)


def test_http_error_without_body():
    error = to_api_error(_status_error(502, text="Bad gateway"))
    assert error == ApiError(ApiErrorKind.HTTP, "HTTP 502", None, 502)
    assert error.user_message(M.PAYMENT_ERRORS, M.CODE_SCAN_FAILED) == M.CODE_SCAN_FAILED


def test_http_error_with_unmapped_code_uses_fallback():
    error = to_api_error(_status_error(400, json={"code": "SOMETHING_NEW"}))
    assert error.code == "SOMETHING_NEW"
    assert error.user_message(M.PAYMENT_ERRORS, M.IDENTIFIER_FAILED) == M.IDENTIFIER_FAILED


def test_timeout_maps_to_server_timeout_message():
    error = to_api_error(httpx.ReadTimeout("slow"))
    assert error.kind is ApiErrorKind.TIMEOUT
    assert error.is_transient
    assert error.user_message(M.PAYMENT_ERRORS, M.CODE_SCAN_FAILED) == M.SERVER_TIMEOUT


def test_transport_and_decode_errors():
    assert to_api_error(httpx.ConnectError("refused")).kind is ApiErrorKind.TRANSPORT
    assert to_api_error(ValueError("bad json")).kind is ApiErrorKind.DECODE


def test_unexpected_exception_propagates():
    with pytest.raises(KeyError):
        to_api_error(KeyError("bug"))
