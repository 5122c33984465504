# app/core/config.py
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from .settings import settings

# no cookie credentials; keys travel in headers
CORS_ALLOW_METHODS = ["GET", "POST", "PATCH", "DELETE"]
CORS_ALLOW_HEADERS = ["apikey", "authorization", "content-type"]


def create_app() -> FastAPI:
    app = FastAPI(title=settings.APP_NAME, debug=settings.APP_ENV == "development")

    origins = settings.CORS_ORIGINS
    if "*" in origins:
        origins = ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=False,
        allow_methods=CORS_ALLOW_METHODS,
        allow_headers=CORS_ALLOW_HEADERS,
    )
    return app
