"""
Health endpoint.

Serves ``GET /health`` for load balancers and uptime monitors. The body is
the ``check_all`` report; the status code is 200 only when every check
passes.
"""

import asyncio

from aiohttp import web
from loguru import logger

from app.utils.health_check import check_all


async def health_handler(request: web.Request) -> web.Response:
    try:
        report = await check_all()
    except Exception as e:
        logger.exception(f"Health check crashed: {e}")
        return web.json_response({"status": "unhealthy", "error": str(e)}, status=503)

    status = 200 if report["status"] == "healthy" else 503
    return web.json_response(report, status=status)


def create_health_app() -> web.Application:
    app = web.Application()
    app.router.add_get("/health", health_handler)
    return app


async def run_health_server(host: str = "0.0.0.0", port: int = 8080) -> web.AppRunner:
    """
    Start serving in the current event loop.

    Returns:
        The runner; call ``cleanup()`` on shutdown
    """
    runner = web.AppRunner(create_health_app())
    await runner.setup()
    await web.TCPSite(runner, host, port).start()
    logger.info(f"Health endpoint listening on http://{host}:{port}/health")
    return runner


async def serve_forever() -> None:
    from app.config.database import close_db
    from app.config.logging import setup_logging
    from app.config.settings import settings

    setup_logging()
    runner = await run_health_server(port=settings.health_check_port)
    try:
        await asyncio.Event().wait()
    finally:
        await runner.cleanup()
        await close_db()


if __name__ == "__main__":
    asyncio.run(serve_forever())
