import asyncio
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

import model  # noqa: F401  registers every table on Base.metadata
from crud.token_crud import purge_expired
from database import engine, Base, SessionLocal, init_mongo
from routers.user_routers import router as user_router
from routers.food_item_routes import router as food_item_router
from routers.cart_routes import router as cart_router
from routers.promo_routes import router as promo_router
from routers.order_routes import router as order_router
from routers.review_routes import router as review_router
from routers.notification_router import router as notification_router
from routers.ws_router import router as ws_router
from routers.wishlist_routes import router as wishlist_router
from utils.config import settings
from utils.middleware.logger import LoggingMiddleware, setup_logging
from utils.notification_consumer import consume_notifications
from utils.redis_client import init_stream_group
from utils.response import error_response, success_response

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

Base.metadata.create_all(bind=engine)

app = FastAPI(title="CraveCart API")

app.add_middleware(LoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    errors = getattr(exc, "errors", None)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(str(exc.detail), errors),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": ".".join(str(p) for p in err.get("loc", ()) if p != "body"), "message": err.get("msg")}
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content=error_response("Validation failed", errors))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=error_response("Internal server error"))


@app.on_event("startup")
async def startup_event():
    db = SessionLocal()
    try:
        purge_expired(db)
    finally:
        db.close()

    if not settings.ENABLE_NOTIFICATION_CONSUMER:
        logger.info("notification consumer disabled")
        return
    await init_mongo()
    await init_stream_group()
    asyncio.create_task(consume_notifications())


@app.get("/")
def health():
    return success_response("CraveCart API is running", {"status": "ok"})


app.include_router(user_router)
app.include_router(food_item_router)
app.include_router(cart_router)
app.include_router(promo_router)
app.include_router(order_router)
app.include_router(review_router)
app.include_router(wishlist_router)
app.include_router(notification_router)
app.include_router(ws_router)
