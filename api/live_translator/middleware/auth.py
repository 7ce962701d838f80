import json
import secrets

from starlette.types import ASGIApp, Receive, Scope, Send

from live_translator.config import settings

# Reachable without a bearer token
PUBLIC_PATHS = frozenset({
    "/api/v1/health",
    "/api/v1/languages",
    "/docs",
    "/openapi.json",
    "/redoc",
    "/metrics",
})


def bearer_token(scope: Scope) -> str | None:
    for name, value in scope.get("headers", []):
        if name == b"authorization":
            scheme, _, token = value.decode("latin-1").partition(" ")
            if scheme.lower() == "bearer" and token:
                return token.strip()
            return None
    return None


class AuthMiddleware:
    """Pure ASGI bearer-token check on API routes.

    CORS preflight requests carry no credentials and always pass.
    """

    def __init__(self, app: ASGIApp, api_key: str | None = None):
        self.app = app
        self.api_key = api_key if api_key is not None else settings.api_key

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        if scope["path"] in PUBLIC_PATHS or scope["method"] == "OPTIONS":
            await self.app(scope, receive, send)
            return

        token = bearer_token(scope)
        if token is None:
            await self._reject(send, "Missing or invalid Authorization header")
            return
        if not secrets.compare_digest(token.encode(), self.api_key.encode()):
            await self._reject(send, "Invalid API key")
            return

        await self.app(scope, receive, send)

    @staticmethod
    async def _reject(send: Send, error: str):
        payload = json.dumps({"error": error}).encode()
        await send({
            "type": "http.response.start",
            "status": 401,
            "headers": [
                [b"content-type", b"application/json"],
                [b"content-length", str(len(payload)).encode()],
                [b"www-authenticate", b"Bearer"],
            ],
        })
        await send({
            "type": "http.response.body",
            "body": payload,
        })
