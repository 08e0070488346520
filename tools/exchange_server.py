# tools/exchange_server.py

import asyncio
import json
from contextlib import asynccontextmanager
from typing import Optional
from urllib.parse import urlparse

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.config import HOST, MCP_PATH, PORT, RATES_API_BASE
from forex.rates import RateStore
from rpc.errors import ParseError
from rpc.manager import Manager, error_response
from utils.logger import install_crash_guards, logger


def create_app(store: Optional[RateStore] = None) -> FastAPI:
    manager = Manager(store)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        install_crash_guards(asyncio.get_running_loop())
        logger.info(f"[Server] Live MCP Forex Server ready, MCP endpoint: {MCP_PATH}")
        yield

    app = FastAPI(title="Live MCP Forex Converter", lifespan=lifespan)
    app.state.manager = manager

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        logger.error(f"[Server] Unexpected error on {request.url.path}", exc_info=exc)
        return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})

    @app.post(MCP_PATH)
    async def mcp_endpoint(request: Request):
        body = await request.body()
        try:
            payload = json.loads(body)
        except (ValueError, RecursionError) as e:
            logger.warning(f"[Server] Unparseable request body: {e}")
            return JSONResponse(error_response(None, ParseError("Parse error")))

        return JSONResponse(await manager.handle(payload))

    @app.get("/")
    async def root():
        return {
            "message": "Live MCP Forex Converter",
            "endpoint": MCP_PATH,
            "status": f"Fetching live rates from {urlparse(RATES_API_BASE).netloc}",
        }

    @app.get("/health")
    async def health():
        # 캐시 상태만 보고하고 갱신은 하지 않는다
        entry = manager.store.entry
        age = manager.store.age()
        return {
            "status": "ok",
            "rates": {
                "source": entry.source if entry else None,
                "currencies": len(entry.rates) if entry else 0,
                "age_seconds": round(age, 1) if age is not None else None,
            },
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    logger.info(f"[Server] Starting Live MCP Forex Server on http://{HOST}:{PORT}{MCP_PATH}")
    uvicorn.run("tools.exchange_server:app", host=HOST, port=PORT, reload=False)
