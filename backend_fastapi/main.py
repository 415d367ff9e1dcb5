import logging
import os
from contextlib import asynccontextmanager
from dotenv import load_dotenv

# Load environment variables from .env file (before the storage modules read them)
load_dotenv()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend_fastapi.api.mcp_server import mcp
from backend_fastapi.api.sessions import SESSION_HEADER
from infrastructure.container import close_backends

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "info").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Crear las apps de transporte antes del lifespan: streamable_http_app()
# inicializa el session manager que arranca el lifespan.
streamable_app = mcp.streamable_http_app()
sse_app = mcp.sse_app()


@asynccontextmanager
async def lifespan(app: FastAPI):
    async with mcp.session_manager.run():
        logger.info("🚀 Servidor MCP listo en /mcp y /sse")
        yield
    close_backends()
    logger.info("👋 Servidor MCP detenido")


app = FastAPI(title="Task Management Server", lifespan=lifespan)

# Configure CORS for frontend from environment variables
cors_origins = os.getenv("CORS_ORIGINS", "*")
if cors_origins == "*":
    origins = ["*"]
else:
    origins = [origin.strip() for origin in cors_origins.split(",")]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=os.getenv("CORS_ALLOW_CREDENTIALS", "true").lower() == "true",
    allow_methods=os.getenv("CORS_ALLOW_METHODS", "*").split(","),
    allow_headers=os.getenv("CORS_ALLOW_HEADERS", "*").split(","),
    expose_headers=[SESSION_HEADER],
)

# Las rutas de los transportes van directas en la app para conservar las
# rutas exactas /mcp, /sse y /sse/message/
app.router.routes.extend(streamable_app.routes)
app.router.routes.extend(sse_app.routes)
