"""Main ASGI application entry point.

Routes:
    POST /ascii   -> Slack slash command; form field ``text`` is the query
    GET  /random  -> any art file, no query needed
    GET  /health  -> corpus size and selection mode
    GET  /metrics -> Prometheus exposition

Usage:
    ASCII_MATCH_ART_ROOT=./art python -m ascii_match.app
"""

from __future__ import annotations

import logging

from pydantic import ValidationError
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from ascii_match import __version__
from ascii_match.config import Settings
from ascii_match.corpus import load_corpus
from ascii_match.errors import CorpusError
from ascii_match.observability import (
    TraceContextMiddleware,
    configure_logging,
    get_metrics,
    get_metrics_content_type,
    init_tracing,
)
from ascii_match.search.engine import MatchEngine
from ascii_match.slack import art_response, not_found_response


logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, engine: MatchEngine | None = None) -> Starlette:
    """Create the ASGI application.

    Args:
        settings: Configuration (defaults to ``Settings()`` from the environment)
        engine: Prebuilt engine; when omitted the corpus under
            ``settings.art_root`` is loaded and indexed

    Raises:
        CorpusError: if the art root cannot be read
    """
    settings = settings or Settings()
    init_tracing(service_name="ascii-match", resource_attributes={"service.version": __version__})
    if engine is None:
        documents = load_corpus(settings.art_root, max_bytes=settings.max_art_bytes, suffix=settings.art_suffix)
        engine = MatchEngine.from_documents(documents, settings)

    async def ascii_command(request: Request) -> JSONResponse:
        form = await request.form()
        query = str(form.get("text", ""))
        art = engine.search(query)
        if art is None:
            return JSONResponse(not_found_response().to_json_dict())
        return JSONResponse(art_response(art, query, with_buttons=settings.slack_buttons).to_json_dict())

    async def random_art(request: Request) -> JSONResponse:
        art = engine.random_document()
        if art is None:
            return JSONResponse(not_found_response().to_json_dict())
        return JSONResponse(art_response(art, "", with_buttons=settings.slack_buttons).to_json_dict())

    async def health_check(request: Request) -> JSONResponse:
        status = "healthy" if engine.doc_count else "degraded"
        return JSONResponse(
            {
                "status": status,
                "documents": engine.doc_count,
                "selection_mode": engine.selection_mode.value,
                "tie_breaker": engine.tie_breaker,
            }
        )

    async def metrics(request: Request) -> Response:
        return Response(get_metrics(), media_type=get_metrics_content_type())

    routes = [
        Route("/ascii", endpoint=ascii_command, methods=["POST"]),
        Route("/random", endpoint=random_art, methods=["GET"]),
        Route("/health", endpoint=health_check, methods=["GET"]),
        Route("/metrics", endpoint=metrics, methods=["GET"]),
    ]

    app = Starlette(
        debug=settings.log_level == "debug",
        routes=routes,
        middleware=[Middleware(TraceContextMiddleware)],
    )
    app.state.engine = engine
    app.state.settings = settings
    logger.info("ascii-match ready with %d documents (%s mode)", engine.doc_count, engine.selection_mode.value)
    return app


def main() -> None:
    """Main entry point."""
    import uvicorn

    try:
        settings = Settings()
    except ValidationError as exc:
        logging.basicConfig(level=logging.ERROR)
        logger.error("Configuration is invalid: %s", exc)
        raise SystemExit(2) from exc

    configure_logging(settings.log_level, settings.log_json)

    logger.info("Starting ascii-match")
    logger.info("Art root: %s", settings.art_root)

    try:
        app = create_app(settings)
    except CorpusError as exc:
        logger.error("Corpus could not be loaded: %s", exc)
        raise SystemExit(1) from exc

    logger.info("Starting server on %s:%d", settings.host, settings.port)
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
        log_config=None,
    )


if __name__ == "__main__":
    main()
