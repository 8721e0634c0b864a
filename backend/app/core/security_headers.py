"""ASGI middleware adding baseline browser security headers to HTTP responses."""

from __future__ import annotations

from typing import TYPE_CHECKING

from starlette.datastructures import MutableHeaders

if TYPE_CHECKING:
    from starlette.types import ASGIApp, Message, Receive, Scope, Send


class SecurityHeadersMiddleware:
    """Inject configured security headers without overriding route-set values.

    Blank values disable the corresponding header. The public territory page
    embeds third-party map links, so the defaults stay conservative and are
    configurable per deployment.
    """

    def __init__(
        self,
        app: ASGIApp,
        *,
        x_content_type_options: str = "",
        x_frame_options: str = "",
        referrer_policy: str = "",
        permissions_policy: str = "",
    ) -> None:
        self.app = app
        configured = {
            "x-content-type-options": x_content_type_options,
            "x-frame-options": x_frame_options,
            "referrer-policy": referrer_policy,
            "permissions-policy": permissions_policy,
        }
        self._headers = {
            name: value.strip() for name, value in configured.items() if value.strip()
        }

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or not self._headers:
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                for name, value in self._headers.items():
                    if name not in headers:
                        headers.append(name, value)
            await send(message)

        await self.app(scope, receive, send_with_headers)
