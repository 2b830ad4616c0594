# main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from shop.version import VERSION
from shop.api import admin, auth, cart, categories, orders, products, users
from shop.core.config import settings
from shop.core.errors import register_exception_handlers
from shop.core.logging import setup_logging

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

# Create instrumentator first
instrumentator = Instrumentator()

app = FastAPI(title='Shop Service', version=VERSION)

# Instrument the app BEFORE adding routes or middleware
instrumentator.instrument(app).expose(
    app,
    include_in_schema=False,
    endpoint="/metrics",
    should_gzip=True,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

@app.get('/health')
def health(): return {'status':'ok'}

@app.get('/v1/_info')
def info(): return {'service':'shop','version':VERSION}

@app.on_event("startup")
async def startup_event():
    for route in app.routes:
        if hasattr(route, "methods") and hasattr(route, "path"):
            logger.debug("%s %s", sorted(route.methods), route.path)
    logger.info("Shop service %s started", VERSION)

app.include_router(auth.router, tags=['auth'])
app.include_router(products.router,   prefix='/products',   tags=['products'])
app.include_router(categories.router, prefix='/categories', tags=['categories'])
app.include_router(cart.router,       prefix='/cart',       tags=['cart'])
app.include_router(orders.router,     prefix='/orders',     tags=['orders'])
app.include_router(users.router,      prefix='/users',      tags=['users'])
app.include_router(admin.router,      prefix='/admin',      tags=['admin'])
