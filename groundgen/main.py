# Run from project root: uvicorn groundgen.main:app --reload

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from groundgen.api.routes import router
from groundgen.core.errors import ServiceUnavailableError

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


app = FastAPI(title="Grounded Generation Proxy")
app.include_router(router)


@app.exception_handler(ServiceUnavailableError)
async def service_unavailable_handler(request: Request, exc: ServiceUnavailableError) -> JSONResponse:
    logger.error("[api:%s] service unavailable: %s", request.url.path, exc.message)
    return JSONResponse(status_code=503, content={"detail": {"message": exc.message, "kind": "service_unavailable"}})
