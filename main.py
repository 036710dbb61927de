import logging
import time

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import DBAPIError, IntegrityError, InterfaceError, OperationalError

from core.config import settings
from core.database import engine
from core.id_generator import IdAllocationError
from models.base import Base

from routers.auth import router as auth_router
from routers.user import router as user_router
from routers.profiles import router as profiles_router
from routers.like import router as like_router
from routers.match import router as match_router
from routers.messages import router as messages_router
from routers.health import router as health_router

app = FastAPI(
    title="CampusMatch Backend",
    debug=settings.DEBUG,
    version="0.1.0",
    description="Backend университетского приложения знакомств: профили, лайки, матчи, сообщения",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

logger = logging.getLogger("uvicorn.error")


@app.middleware("http")
async def log_request_time(request: Request, call_next):
    start_time = time.perf_counter()
    response = await call_next(request)
    process_time = (time.perf_counter() - start_time) * 1000
    logger.info(
        f"{request.method} {request.url.path} completed in {process_time:.2f} ms"
    )
    return response


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    # Например, лайк пользователю, удалённому между проверкой и записью
    logger.warning(f"{request.method} {request.url.path} constraint violation: {exc.orig}")
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": "Request conflicts with stored data"},
    )


@app.exception_handler(OperationalError)
@app.exception_handler(InterfaceError)
@app.exception_handler(DBAPIError)
async def storage_unavailable_handler(request: Request, exc: DBAPIError):
    logger.warning(f"{request.method} {request.url.path} storage failure: {exc.orig}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Storage temporarily unavailable, retry the request"},
    )


@app.exception_handler(IdAllocationError)
async def id_allocation_error_handler(request: Request, exc: IdAllocationError):
    logger.error(f"{request.method} {request.url.path} id allocation failed: {exc}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Storage temporarily unavailable, retry the request"},
    )


app.include_router(auth_router)
app.include_router(user_router)
app.include_router(profiles_router)
app.include_router(like_router)
app.include_router(match_router)
app.include_router(messages_router)
app.include_router(health_router)


@app.on_event("startup")
async def on_startup():
    # Создаём все таблицы
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@app.get("/")
async def root():
    return {"message": "CampusMatch Backend"}


@app.on_event("shutdown")
async def shutdown():
    # Закрываем все соединения пула
    await engine.dispose()
