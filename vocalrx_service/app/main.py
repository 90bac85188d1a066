import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.core.llm_config import LOG_FORMAT, LOG_LEVEL
from app.api.routes_ai import router as ai_router

logging.basicConfig(
    level=getattr(logging, str(LOG_LEVEL).upper(), logging.INFO),
    format=LOG_FORMAT,
)

app = FastAPI(title="VocalRx (dictation to prescription)", version="1.0")

@app.exception_handler(RequestValidationError)
async def validation_error_as_400(request: Request, exc: RequestValidationError):
    # missing / wrong-typed payloads are caller errors: 400, not FastAPI's 422
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})

app.include_router(ai_router)

@app.get("/health")
def health():
    return {"ok": True}
@app.get("/")
def root():
    return {"ok": True, "service": "VocalRx (dictation to prescription)"}

if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, log_level=str(LOG_LEVEL).lower())
