from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request, Response, status
from fastapi.responses import HTMLResponse, JSONResponse

from alert_issues.config import Settings
from alert_issues.errors import DecodeError
from alert_issues.issues import GitHubIssueDirectory, IssueDirectory
from alert_issues.locking import IdentityLocks
from alert_issues.receiver import NotificationReceiver
from alert_issues.reconciler import Reconciler
from alert_issues.viewer import render_open_issues

RECEIVER_PATH = "/v1/receiver"


def _install(app: FastAPI, settings: Settings, directory: IssueDirectory) -> None:
    locks = IdentityLocks() if settings.serialize_by_identity else None
    app.state.directory = directory
    app.state.receiver = NotificationReceiver(Reconciler(directory, locks=locks))


def create_app(settings: Settings, directory: IssueDirectory | None = None) -> FastAPI:
    """Build the webhook service.

    When ``directory`` is omitted a GitHubIssueDirectory is opened for the
    lifetime of the application.
    """
    log = structlog.get_logger().bind(service="alertmanager-issues", repository=settings.repository)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if directory is not None:
            yield
            return
        async with GitHubIssueDirectory.from_settings(settings) as github:
            _install(app, settings, github)
            log.info("receiver_started")
            yield
        log.info("receiver_stopped")

    app = FastAPI(title="Alertmanager Issues Receiver", lifespan=lifespan)
    if directory is not None:
        _install(app, settings, directory)

    @app.post(RECEIVER_PATH)
    async def receive_alert(request: Request) -> Response:
        try:
            body = await request.body()
        except Exception as exc:
            log.exception("request_body_read_failed", error=str(exc))
            return Response(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

        receiver: NotificationReceiver = request.app.state.receiver
        try:
            notification = receiver.decode(body)
        except DecodeError as exc:
            client = request.client.host if request.client else "unknown"
            log.warning("webhook_decode_failed", client=client, error=str(exc))
            return JSONResponse({"detail": str(exc)}, status_code=status.HTTP_400_BAD_REQUEST)

        await receiver.dispatch(notification)
        return JSONResponse({"status": "received"})

    # Every non-POST method, so each rejection is logged.
    @app.api_route(
        RECEIVER_PATH,
        methods=["GET", "HEAD", "PUT", "PATCH", "DELETE", "OPTIONS"],
        include_in_schema=False,
    )
    async def reject_method(request: Request) -> Response:
        client = request.client.host if request.client else "unknown"
        log.warning("unsupported_method", method=request.method, client=client)
        return Response(status_code=status.HTTP_405_METHOD_NOT_ALLOWED, headers={"Allow": "POST"})

    @app.get("/", response_class=HTMLResponse)
    async def issue_viewer(request: Request) -> HTMLResponse:
        return HTMLResponse(await render_open_issues(request.app.state.directory))

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app
