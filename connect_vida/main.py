"""
Connect Vida - Main Application
API de gestão de igrejas: membros, finanças, eventos, devocionais e jornada
"""
import logging
import traceback
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from connect_vida.core import settings
from connect_vida.core.error_notifier import send_error_notification
from connect_vida.core.rate_limit import limiter
from connect_vida.database import init_db, AsyncSessionLocal
from connect_vida.api import (
    auth_router,
    churches_router,
    master_admin_router,
    members_router,
    payments_router,
    finance_router,
    contributions_router,
    events_router,
    devotionals_router,
    journey_router,
    vocational_router,
    ministries_router,
    stats_router
)
from connect_vida.api.payments import ensure_plans_exist

# Rate limiting
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifecycle do aplicativo"""
    # Startup
    print(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    print(f"Environment: {settings.ENVIRONMENT}")

    # Inicializa banco de dados
    await init_db()
    async with AsyncSessionLocal() as db:
        await ensure_plans_exist(db)
    print("Database initialized")

    yield

    # Shutdown
    print("Shutting down...")


# Middleware de headers de seguranca
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adiciona headers de seguranca em todas as respostas"""
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-XSS-Protection"] = "1; mode=block"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        # Respostas de pagamento nunca vao para cache
        if "/payments" in request.url.path:
            response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate"
            response.headers["Pragma"] = "no-cache"
        return response


# Cria aplicação
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Church management API: members, finance, events, devotionals and growth journey",
    lifespan=lifespan,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None
)

# Configura rate limiter na aplicacao
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Erros nao tratados: loga, notifica por email e devolve 500"""
    logger.error(f"Erro nao tratado em {request.method} {request.url.path}: {exc}")
    send_error_notification(
        error_type="UNHANDLED_ERROR",
        error_message=str(exc),
        error_details=traceback.format_exc(),
        endpoint=f"{request.method} {request.url.path}"
    )
    return JSONResponse(status_code=500, content={"detail": "Erro interno do servidor"})


# Headers de seguranca (adicionar ANTES do CORS)
app.add_middleware(SecurityHeadersMiddleware)

# CORS (deve vir DEPOIS dos headers de seguranca)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(auth_router, prefix="/api")
app.include_router(churches_router, prefix="/api")
app.include_router(master_admin_router, prefix="/api")
app.include_router(members_router, prefix="/api")
app.include_router(payments_router, prefix="/api")
app.include_router(finance_router, prefix="/api")
app.include_router(contributions_router, prefix="/api")
app.include_router(events_router, prefix="/api")
app.include_router(devotionals_router, prefix="/api")
app.include_router(journey_router, prefix="/api")
app.include_router(vocational_router, prefix="/api")
app.include_router(ministries_router, prefix="/api")
app.include_router(stats_router, prefix="/api")


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running"
    }


@app.get("/health")
async def health():
    """Health check"""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "connect_vida.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG
    )
