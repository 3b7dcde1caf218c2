"""ASGI middleware for the DICOMweb gateway."""

from starlette import status
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from caseweb.api.exception_handlers import error_response
from caseweb.utils.case_id import split_case_id
from caseweb.utils.logger import logger


class CaseIdPathMiddleware:
    """Move a ``caseId=`` fragment embedded in the path into the query string.

    Runs before routing so the route table only ever sees clean DICOMweb paths
    and can read the case id as an ordinary query parameter.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http":
            query_string = scope.get("query_string", b"").decode("latin-1")
            path, new_query, case_id = split_case_id(scope["path"], query_string)
            if path != scope["path"] or new_query != query_string:
                logger.debug(f"Rewrote '{scope['path']}' to '{path}' for case {case_id}")
                scope = dict(scope)
                scope["path"] = path
                scope["raw_path"] = path.encode("utf-8")
                scope["query_string"] = new_query.encode("latin-1")
            logger.debug(f"{scope['method']} {scope['path']}")
        await self.app(scope, receive, send)


class UnhandledErrorMiddleware:
    """Answer unexpected exceptions with a JSON 500.

    Must be installed inside ``CORSMiddleware``: Starlette's own 500 handler
    runs outside all user middleware and its responses carry no CORS headers.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as exc:
            logger.opt(exception=exc).error(f"Unhandled error on {scope['method']} {scope['path']}")
            if response_started:
                raise
            response = error_response(
                status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc) or type(exc).__name__
            )
            await response(scope, receive, send)
