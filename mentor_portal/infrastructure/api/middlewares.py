from __future__ import annotations

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware
from starlette.types import ASGIApp, Receive, Scope, Send

from mentor_portal.infrastructure.config import Settings

# Edge-function style routes answer CORS themselves with fixed permissive headers
FUNCTIONS_PREFIX = "/functions/v1/"


class DashboardCORSMiddleware(CORSMiddleware):
    """Starlette CORS for the dashboard API that leaves ``exempt_prefixes`` alone."""

    def __init__(self, app: ASGIApp, exempt_prefixes: tuple[str, ...] = (), **kwargs) -> None:
        super().__init__(app, **kwargs)
        self.exempt_prefixes = exempt_prefixes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http" and scope["path"].startswith(self.exempt_prefixes):
            await self.app(scope, receive, send)
            return
        await super().__call__(scope, receive, send)


def add_default_middlewares(app: FastAPI, settings: Settings) -> None:
    origins = settings.resolved_cors_origins()
    app.add_middleware(
        DashboardCORSMiddleware,
        exempt_prefixes=(FUNCTIONS_PREFIX,),
        allow_origins=origins,
        allow_credentials=origins != ["*"],
        allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
        allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
    )
