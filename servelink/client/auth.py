"""
Signed-in state on the client side.

AuthSession keeps the current user, profile and home route, and tells
listeners whenever they change (sign-in, sign-out, refresh).
"""

import logging
from typing import Awaitable, Callable, List, Optional, Union

from servelink.client.api import APIResult, ServeLinkClient

logger = logging.getLogger(__name__)

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"
REFRESHED = "REFRESHED"

Listener = Callable[[str, "AuthSession"], Union[None, Awaitable[None]]]


class AuthSession:
    def __init__(self, client: ServeLinkClient):
        self.client = client
        self.user: Optional[dict] = None
        self.profile: Optional[dict] = None
        self.home_route: Optional[str] = None
        self._listeners: List[Listener] = []

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def role(self) -> Optional[str]:
        return self.profile.get("role") if self.profile else None

    def on_change(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that removes it."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    async def _emit(self, event: str) -> None:
        for listener in list(self._listeners):
            outcome = listener(event, self)
            if outcome is not None:
                await outcome

    def _apply(self, data: Optional[dict]) -> None:
        self.user = data["user"] if data else None
        self.profile = data.get("profile") if data else None
        self.home_route = data["home_route"] if data else None

    async def sign_up(
        self,
        email: str,
        password: str,
        full_name: Optional[str] = None,
        role: str = "owner",
    ) -> APIResult:
        result = await self.client.signup(email, password, full_name=full_name, role=role)
        if result.ok:
            self._apply(result.data)
            await self._emit(SIGNED_IN)
        return result

    async def sign_in(self, email: str, password: str) -> APIResult:
        result = await self.client.login(email, password)
        if result.ok:
            self._apply(result.data)
            await self._emit(SIGNED_IN)
        return result

    async def sign_out(self) -> APIResult:
        result = await self.client.logout()
        self._apply(None)
        await self._emit(SIGNED_OUT)
        return result

    async def refresh(self) -> APIResult:
        """Reload the session from the server; a rejected token signs out."""
        result = await self.client.me()
        if result.ok:
            self._apply(result.data)
            await self._emit(REFRESHED)
        elif result.status_code == 401:
            logger.info("Session no longer valid, signing out")
            self.client.token = None
            self._apply(None)
            await self._emit(SIGNED_OUT)
        return result
