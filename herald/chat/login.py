"""Client for the Pokémon Showdown login server.

Joining chat under a name requires an assertion: a token signed by the login
server that binds the connection's challenge string to the account. The
server speaks form-encoded requests to ``action.php``.
"""

from __future__ import annotations

import typing as typ

import httpx
import msgspec

from .errors import ChatLoginError
from .protocol import to_user_id

_HTTP_ERROR_STATUS_THRESHOLD = 400
# JSON replies are prefixed to defeat cross-site script inclusion.
_JSON_PREFIX = "]"
_ERROR_PREFIX = ";;"
_REGISTERED_MARKER = ";"


class LoginClient(typ.Protocol):
    """Interface for obtaining login assertions."""

    async def get_assertion(
        self, username: str, password: str, challenge: str
    ) -> str:
        """Return an assertion for ``username`` answering ``challenge``."""
        ...

    async def aclose(self) -> None:
        """Release any owned resources."""
        ...


class _LoginResponse(msgspec.Struct, kw_only=True):
    actionsuccess: bool = False
    assertion: str | None = None


_LOGIN_DECODER = msgspec.json.Decoder(_LoginResponse)


class ShowdownLoginClient:
    """httpx implementation of :class:`LoginClient`.

    Parameters
    ----------
    login_url
        Full URL of the login server's ``action.php``.
    http_client
        Optional ``httpx.AsyncClient`` for testing. If not provided, the
        instance creates and owns its own client.
    timeout_s
        Request timeout for an owned client.

    """

    def __init__(
        self,
        login_url: str,
        *,
        http_client: httpx.AsyncClient | None = None,
        timeout_s: float = 20.0,
    ) -> None:
        """Initialise the client for ``login_url``."""
        self._login_url = login_url
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=timeout_s,
            headers={"User-Agent": "herald/0.1"},
        )

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    async def get_assertion(
        self, username: str, password: str, challenge: str
    ) -> str:
        """Return an assertion for ``username`` answering ``challenge``.

        With a password, the account is logged in; without one, an assertion
        is requested for an unregistered name.

        Raises
        ------
        ChatLoginError
            If the login server is unreachable, answers with an error status,
            or refuses the credentials.

        """
        if password:
            body = await self._post(
                {
                    "act": "login",
                    "name": username,
                    "pass": password,
                    "challstr": challenge,
                }
            )
            return self._parse_login(username, body)

        body = await self._post(
            {
                "act": "getassertion",
                "userid": to_user_id(username),
                "challstr": challenge,
            }
        )
        return self._parse_getassertion(username, body)

    async def _post(self, form: dict[str, str]) -> str:
        try:
            response = await self._client.post(self._login_url, data=form)
        except httpx.TimeoutException as exc:
            raise ChatLoginError.network_error("request timed out") from exc
        except httpx.RequestError as exc:
            raise ChatLoginError.network_error(str(exc)) from exc

        if response.status_code >= _HTTP_ERROR_STATUS_THRESHOLD:
            raise ChatLoginError.http_error(response.status_code)
        return response.text

    @staticmethod
    def _parse_login(username: str, body: str) -> str:
        if not body.startswith(_JSON_PREFIX):
            raise ChatLoginError.invalid_response(body)
        try:
            reply = _LOGIN_DECODER.decode(body[len(_JSON_PREFIX) :])
        except msgspec.DecodeError as exc:
            raise ChatLoginError.invalid_response(body) from exc

        assertion = reply.assertion
        if not reply.actionsuccess or not assertion:
            raise ChatLoginError.rejected(username, "wrong name or password")
        if assertion.startswith(_ERROR_PREFIX):
            raise ChatLoginError.rejected(username, assertion[len(_ERROR_PREFIX) :])
        return assertion

    @staticmethod
    def _parse_getassertion(username: str, body: str) -> str:
        assertion = body.strip()
        if not assertion:
            raise ChatLoginError.invalid_response(body)
        if assertion.startswith(_ERROR_PREFIX):
            raise ChatLoginError.rejected(username, assertion[len(_ERROR_PREFIX) :])
        if assertion == _REGISTERED_MARKER:
            raise ChatLoginError.rejected(username, "name is registered")
        return assertion


__all__ = ["LoginClient", "ShowdownLoginClient"]
