from starlette.middleware.cors import CORSMiddleware
from starlette.types import ASGIApp, Receive, Scope, Send

# Routes that answer their own preflights with fixed CORS headers
SELF_CORS_PATHS = frozenset({
    "/api/v1/ptt",
    "/api/v1/tts",
})


class RouteCORSMiddleware(CORSMiddleware):
    """CORSMiddleware for every route except those in `self_cors_paths`.

    Requests to those paths, preflights included, go straight to the route.
    """

    def __init__(
        self,
        app: ASGIApp,
        self_cors_paths: frozenset[str] = SELF_CORS_PATHS,
        **kwargs,
    ):
        super().__init__(app, **kwargs)
        self.self_cors_paths = self_cors_paths

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        if scope["type"] == "http" and scope["path"] in self.self_cors_paths:
            await self.app(scope, receive, send)
            return
        await super().__call__(scope, receive, send)
