# app/main.py
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from dotenv import load_dotenv

load_dotenv()

from app.config import settings
from app.db import close_client, create_indexes, get_collection, ping
from app.routes.chats import router as chats_router
from app.routes.health import router as health_router
from app.services.chat_service import ChatService

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.app_name,
    description="Persistence backend for chat conversations",
    version=settings.app_version,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(chats_router)
app.include_router(health_router)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.on_event("startup")
async def on_startup():
    try:
        await ping()
        if settings.mongo_create_indexes:
            await create_indexes()
    except Exception:
        # uvicorn aborts startup when this hook raises
        logger.exception("Error during server setup")
        raise
    app.state.chat_service = ChatService(get_collection(settings.chats_collection))
    logger.info("Successfully connected to MongoDB database %s", settings.mongo_db_name)


@app.on_event("shutdown")
async def on_shutdown():
    app.state.chat_service = None
    close_client()


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": f"Welcome to {settings.app_name}",
        "status": "running",
        "version": settings.app_version,
    }


def run() -> None:
    import uvicorn

    logger.info(f"Server is running on port {settings.port}")
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
