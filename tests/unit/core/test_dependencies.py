import pytest
from jose import JWTError
from app.core.ctx import AUTH_SUBJECT_CTX
from app.core.dependencies.auth import get_token, get_token_payload, get_current_operator
from app.domain.auth.schemas import OperatorAccount, TokenPayload
from app.domain.exceptions import Unauthorized
from tests.helper import make_settings


def fake_request(mocker, cookies=None, headers=None):
    request = mocker.Mock()
    request.cookies = cookies or {}
    request.headers = headers or {}
    return request


def test_get_token_prefers_cookie(mocker):
    request = fake_request(mocker, cookies={"token": "from-cookie"}, headers={"authorization": "Bearer from-header"})

    assert get_token(request, make_settings()) == "from-cookie"


def test_get_token_falls_back_to_bearer_header(mocker):
    request = fake_request(mocker, headers={"authorization": "Bearer abc.def"})

    assert get_token(request, make_settings()) == "abc.def"


@pytest.mark.parametrize("headers", [{}, {"authorization": "Basic abc"}, {"authorization": "Bearer "}])
def test_get_token_without_credentials_raises_401(mocker, headers):
    with pytest.raises(Unauthorized) as e:
        get_token(fake_request(mocker, headers=headers), make_settings())

    assert e.value.ctx["reason"] == "missing_token"


@pytest.mark.asyncio
async def test_get_token_payload_ok(mocker):
    mocker.patch("app.core.dependencies.auth.decode_access_token",
                 return_value={
                     "sub": "admin@example.com",
                     "iat": 1,
                     "exp": 2,
                     "nbf": 1,
                     "typ": "access",
                     "iss": "seat-booking-api",
                     "aud": "seat-booking-web"
                 })

    payload = await get_token_payload("token", make_settings())

    assert payload.sub == "admin@example.com"


@pytest.mark.asyncio
async def test_get_token_payload_invalid_jwt_raises_401(mocker):
    mocker.patch("app.core.dependencies.auth.decode_access_token", side_effect=JWTError("err"))

    with pytest.raises(Unauthorized) as e:
        await get_token_payload("bad-token", make_settings())

    assert "invalid_token" in e.value.ctx.get("reason", "")


@pytest.mark.asyncio
async def test_get_token_payload_wrong_type_raises_401(mocker):
    mocker.patch("app.core.dependencies.auth.decode_access_token",
                 return_value={"sub": "admin@example.com", "iat": 1, "exp": 2, "nbf": 1, "typ": "refresh"})

    with pytest.raises(Unauthorized) as e:
        await get_token_payload("refresh-token", make_settings())

    assert e.value.ctx.get("reason") == "invalid_type"


@pytest.mark.asyncio
async def test_get_token_payload_invalid_payload_raises_401(mocker):
    mocker.patch("app.core.dependencies.auth.decode_access_token",
                 return_value={"sub": "admin@example.com", "typ": "access"})

    with pytest.raises(Unauthorized) as e:
        await get_token_payload("invalid-payload", make_settings())

    assert e.value.ctx.get("reason") == "invalid_token"


@pytest.mark.asyncio
async def test_get_current_operator_when_subject_matches():
    operator = OperatorAccount(email="admin@example.com", password_hash="hash")
    payload = TokenPayload(sub="admin@example.com", iat=1, nbf=1, exp=2)

    user = await get_current_operator(payload, operator)

    assert user.email == "admin@example.com"
    assert AUTH_SUBJECT_CTX.get() == "admin@example.com"


@pytest.mark.asyncio
async def test_get_current_operator_when_subject_differs_raises_401():
    operator = OperatorAccount(email="admin@example.com", password_hash="hash")
    payload = TokenPayload(sub="old@example.com", iat=1, nbf=1, exp=2)

    with pytest.raises(Unauthorized) as e:
        await get_current_operator(payload, operator)

    assert e.value.ctx["reason"] == "unknown_subject"
