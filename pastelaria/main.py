import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from pastelaria import __version__
from pastelaria.config import get_settings
from pastelaria.database import engine
from pastelaria.errors import PastelariaError, UnauthenticatedError, ValidationError
from pastelaria.models import Base
from pastelaria.routers import (
    auth, users, products, shifts, withdrawals, records,
    finance, reports, events,
)

# 1. LOGGING
logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# 2. CRIAÇÃO AUTOMÁTICA DAS TABELAS
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="Pastelaria 24h",
    description="PDV e conciliação de caixa por turno",
    version=__version__,
)

# 3. CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 4. REGISTRO DOS ROUTERS
app.include_router(auth.router, prefix="/api/auth", tags=["🔑 Autenticação"])
app.include_router(users.router, prefix="/api/users", tags=["👤 Usuários"])
app.include_router(products.router, prefix="/api/products", tags=["🥟 Cardápio"])
app.include_router(shifts.router, prefix="/api/shifts", tags=["💰 Turnos & Fechamento"])
app.include_router(withdrawals.router, prefix="/api/shifts", tags=["💸 Sangrias"])
app.include_router(records.router, prefix="/api/shifts", tags=["🛒 Vendas & Consumo"])
app.include_router(finance.router, prefix="/api/finance", tags=["🏦 Cofre"])
app.include_router(reports.router, prefix="/api/reports", tags=["📊 Relatórios & Auditoria"])
app.include_router(events.router, prefix="/api/events", tags=["📡 Eventos"])


# --- 5. TRATAMENTO DE ERROS ---
@app.exception_handler(PastelariaError)
async def domain_exception_handler(request: Request, exc: PastelariaError):
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthenticatedError) else None
    return JSONResponse(
        status_code=exc.http_status,
        content={"detail": exc.message, "code": exc.code},
        headers=headers,
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # Corpo/parâmetros malformados seguem o mesmo contrato de invalid-argument
    return JSONResponse(
        status_code=ValidationError.http_status,
        content={"detail": jsonable_encoder(exc.errors()), "code": ValidationError.code},
    )


@app.exception_handler(404)
async def not_found_exception_handler(request: Request, exc):
    return JSONResponse(status_code=404, content={"detail": "Recurso não encontrado", "code": "not-found"})
