from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from helpdesk.backend.api.routes.groups import router as groups_router
from helpdesk.backend.api.routes.health import router as health_router
from helpdesk.backend.api.routes.internal import router as internal_router
from helpdesk.backend.api.routes.login import router as login_router
from helpdesk.backend.api.routes.search import router as search_router
from helpdesk.backend.api.routes.tickets import router as tickets_router
from helpdesk.backend.api.routes.upload import router as upload_router
from helpdesk.backend.api.routes.users import router as users_router
from helpdesk.backend.core.database import Database
from helpdesk.backend.core.errors import HelpdeskError, RouteNotFound, ValidationFailed
from helpdesk.backend.core.settings import Settings, settings as default_settings
from helpdesk.backend.core.tracing import TRACEPARENT_HEADER, get_trace
from helpdesk.shared.logging_config import logger
from helpdesk.shared.schemas import CONTRACT_VERSION, CONTRACT_VERSION_HEADER, ApiError, Failure


def error_response(request: Request, status_code: int, code: str, report: str) -> JSONResponse:
    trace = get_trace(request)
    if status_code >= 500:
        logger.error(
            "%s %s -> %s %s: %s (trace_id=%s, span_id=%s)",
            request.method,
            request.url.path,
            status_code,
            code,
            report,
            trace.trace_id,
            trace.span_id,
        )
    body = Failure(
        payload=ApiError(
            underlying_error=code,
            report=report,
            trace_id=trace.trace_id,
            span_id=trace.span_id,
        )
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def _validation_report(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        location = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{location}: {err.get('msg')}")
    return "; ".join(parts) or "invalid request"


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(HelpdeskError)
    async def helpdesk_error_handler(request: Request, exc: HelpdeskError) -> JSONResponse:
        return error_response(request, exc.status_code, exc.code, exc.report)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return error_response(request, 400, ValidationFailed.code, _validation_report(exc))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        # 405: путь есть, но не для этого метода; для клиента это тоже отсутствующий маршрут
        if exc.status_code in (404, 405):
            report = f"{RouteNotFound.message}: {request.method} {request.url.path}"
            return error_response(request, RouteNotFound.status_code, RouteNotFound.code, report)
        if exc.status_code >= 500:
            return error_response(request, exc.status_code, HelpdeskError.code, str(exc.detail))
        return error_response(request, ValidationFailed.status_code, ValidationFailed.code, str(exc.detail))


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings
    app = FastAPI(title=settings.APP_NAME)
    app.state.settings = settings
    app.state.database = Database(settings.DATABASE_URL)
    app.state.database.create_all()

    @app.middleware("http")
    async def trace_requests(request: Request, call_next):
        trace = get_trace(request)
        try:
            response = await call_next(request)
        except Exception as e:  # noqa: BLE001
            # Необработанная ошибка всё равно возвращается в виде конверта
            logger.exception("Необработанная ошибка при %s %s", request.method, request.url.path)
            response = error_response(request, 500, "Internal", f"Internal server error: {type(e).__name__}")
        response.headers[TRACEPARENT_HEADER] = trace.traceparent()
        response.headers[CONTRACT_VERSION_HEADER] = CONTRACT_VERSION
        return response

    register_error_handlers(app)

    prefix = settings.API_PREFIX
    app.include_router(health_router, prefix=prefix)
    app.include_router(login_router, prefix=prefix)
    app.include_router(users_router, prefix=prefix)
    app.include_router(groups_router, prefix=prefix)
    app.include_router(tickets_router, prefix=prefix)
    app.include_router(search_router, prefix=prefix)
    app.include_router(upload_router, prefix=prefix)
    if settings.EXPOSE_INTERNAL_ROUTES:
        logger.warning("Внутренние маршруты (/users/{id}, /fake-login) открыты: только для dev/тестов")
        app.include_router(internal_router, prefix=prefix)

    return app
