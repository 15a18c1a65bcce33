from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from curated.api.http import (
    health_router, users_router, definitions_router, authors_router, sources_router
)
from curated.core.config import settings
from curated.core.db import init_models
from curated.core.errors import DomainError, InvalidInputError, status_for
from curated.core.logging import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.log_level)
    if settings.create_schema_on_startup:
        await init_models()
    logger.info("Curated definitions service started")
    yield


app = FastAPI(
    title="Curated Definitions",
    description="Отправка определений с обязательной проверкой администратором",
    version="1.0.0",
    lifespan=lifespan
)

# Настройка CORS для работы с frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # В продакшене указать конкретные домены
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    """Ошибки домена: стабильный код и HTTP-статус из статической таблицы"""
    return JSONResponse(
        status_code=status_for(exc),
        content={"error": exc.code, "detail": str(exc)}
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Ошибки валидации запроса в формате INVALID_INPUT"""
    fields = [".".join(str(part) for part in error["loc"]) for error in exc.errors()]
    return JSONResponse(
        status_code=status_for(InvalidInputError()),
        content={
            "error": InvalidInputError.code,
            "detail": "Error on fields: " + ", ".join(fields)
        }
    )


# Подключаем роутеры
app.include_router(health_router)
app.include_router(users_router)
app.include_router(definitions_router)
app.include_router(authors_router)
app.include_router(sources_router)


@app.get("/")
async def root():
    """Корневой эндпоинт"""
    return {
        "message": "Curated Definitions API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health"
    }
