import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from starlette.middleware.sessions import SessionMiddleware

from shopcart.core.config import settings
from shopcart.core.storefront_client import StorefrontClient
from shopcart.api import cart
from shopcart.services.cart import CartRegistry
from shopcart.services.storage import CartStorage, DatabaseStorage

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def create_app(storage: Optional[CartStorage] = None, client: Optional[StorefrontClient] = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        cart_storage = storage
        if cart_storage is None:
            from shopcart.db.session import async_session, init_db
            await init_db()
            cart_storage = DatabaseStorage(async_session)

        storefront_client = client or StorefrontClient()
        app.state.cart_registry = CartRegistry(
            cart_storage,
            storefront_client,
            settings.CART_STORAGE_KEY,
            max_size=settings.CART_CACHE_SIZE
        )
        logger.info(f"Starting {settings.SHOP_NAME} cart service against {storefront_client.base_url}")

        yield

        logger.info("Shutting down cart service")
        await storefront_client.close()

    app = FastAPI(
        title=f"{settings.SHOP_NAME} - Cart",
        description="Shopping cart backed by the storefront stock API",
        version="1.0.0",
        openapi_url="/api/openapi.json",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        lifespan=lifespan,
    )

    # Session cookie carries the cart id
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.SESSION_SECRET_KEY,
        max_age=settings.SESSION_MAX_AGE
    )

    app.include_router(cart.router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "ok",
            "shop_name": settings.SHOP_NAME
        }

    return app


app = create_app()
