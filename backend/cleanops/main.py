"""
Module principal de l'application FastAPI CleanOps.

Configure le logging, l'instance FastAPI, le middleware CORS, le gestionnaire
des erreurs de validation et inclut les routeurs du back-office de stock
(authentification, catégories, produits, mouvements de stock, notifications).
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cleanops.config import settings
from cleanops.core.errors import register_exception_handlers
from cleanops.database import create_tables

# --- Importer les routeurs ---
from cleanops.auth.router import auth_router
from cleanops.categories.router import router as categories_router
from cleanops.products.router import router as products_router
from cleanops.stock_movements.router import router as stock_router
from cleanops.notifications.router import router as notifications_router

# Configurer le logging
logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_tables()
    logger.info("Tables de la base de données vérifiées.")
    yield


app = FastAPI(
    title="CleanOps API",
    description="Back-office de gestion des stocks: produits, catégories, mouvements et alertes.",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# ======================================================
# Inclure les routeurs
# ======================================================
API_PREFIX = settings.API_V1_PREFIX

app.include_router(auth_router, prefix=f"{API_PREFIX}/auth", tags=["Authentification"])
app.include_router(categories_router, prefix=f"{API_PREFIX}/categories")
app.include_router(products_router, prefix=f"{API_PREFIX}/products")
app.include_router(stock_router, prefix=f"{API_PREFIX}/stock")
app.include_router(notifications_router, prefix=f"{API_PREFIX}/notifications")


@app.get("/health", tags=["Santé"])
async def health_check():
    return {"status": "ok"}
