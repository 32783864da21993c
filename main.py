from contextlib import asynccontextmanager
import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from routers import ia, tareas, catalogo
from database import create_tables
from dependencies import get_settings
from services.errors import AssistantError

settings = get_settings()
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create database tables at startup
    create_tables()
    yield

app = FastAPI(title="Tareas Backend", lifespan=lifespan)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Every error leaves as {"error": "..."}
@app.exception_handler(AssistantError)
async def assistant_error_handler(request: Request, exc: AssistantError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    fields = ", ".join(".".join(str(part) for part in err["loc"] if part != "body") for err in exc.errors())
    return JSONResponse(status_code=400, content={"error": f"Datos inválidos: {fields or 'cuerpo'}"})

@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"error": "Error interno del servidor"})

# Include routers
app.include_router(ia.router)
app.include_router(tareas.router)
app.include_router(catalogo.router)

@app.get("/")
async def root():
    return {"message": "Welcome to Tareas Backend"}
