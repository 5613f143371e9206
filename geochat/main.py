from importlib.metadata import version

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from geochat.chat.router import router as chat_router
from geochat.config import get_client_base_url


def get_version():
    """Get version from the installed package metadata"""
    return version("geochat")


app = FastAPI(
    title="GeoChat API",
    description="Location-aware chat grounded in web search and maps",
    version=get_version(),
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[get_client_base_url()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(chat_router, prefix="/api")


@app.get("/")
async def root():
    """Root endpoint."""
    return {"status": "ok", "message": "GeoChat API is running"}


@app.get("/healthcheck")
async def healthcheck():
    """Health check endpoint."""
    return {"status": "ok", "message": "GeoChat API is running"}
