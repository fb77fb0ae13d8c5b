"""
Weight Loss Challenge - FastAPI Application

REST API for yearly 12-week weight loss competitions: weekly weigh-ins,
derived statistics and role-gated leaderboards.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse

from .api import admin_routes, auth_routes, routes
from .api.dependencies import get_db, get_identity
from .auth import IdentityProvider, get_identity_provider, reset_identity_provider
from .errors import AuthenticationError, ChallengeError
from .storage import DatabaseError, DatabaseInterface, get_database, reset_database
from . import __version__, config

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    print("[*] Connecting to database...")
    db = get_database()
    stats = db.get_stats()
    print(
        f"[+] Database ready: {stats['competitions']} competitions, "
        f"{stats['participants']} participants, {stats['weigh_ins']} weigh-ins"
    )
    get_identity_provider()
    print("[*] App is ready.")

    yield

    print("[*] Shutting down...")
    reset_identity_provider()
    reset_database()


# Initialize FastAPI app with lifespan
app = FastAPI(
    title="Weight Loss Challenge",
    description="Weekly weigh-ins, statistics and leaderboards for yearly weight loss competitions",
    version=__version__,
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_routes.router)
app.include_router(routes.router)
app.include_router(admin_routes.router)


# ============================================================================
# ERROR HANDLING
# ============================================================================

@app.exception_handler(ChallengeError)
async def challenge_error_handler(request: Request, exc: ChallengeError) -> JSONResponse:
    """Application errors carry their own status code."""
    content = {"detail": exc.message}
    if isinstance(exc, AuthenticationError):
        content["code"] = exc.code
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(DatabaseError)
async def database_error_handler(request: Request, exc: DatabaseError) -> JSONResponse:
    """Storage failures are logged; the caller only gets a generic message."""
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={"detail": "An error occurred. Please try again"}
    )


@app.get("/", response_class=HTMLResponse)
async def home():
    """Landing page listing the main endpoints."""
    return HTMLResponse(
        content="""
        <html>
        <head><title>Weight Loss Challenge</title></head>
        <body style="font-family: sans-serif; padding: 40px;">
            <h1>Weight Loss Challenge</h1>
            <p>API is running.</p>
            <h2>API Endpoints:</h2>
            <ul>
                <li>POST /api/auth/register, /api/auth/login - Accounts</li>
                <li>GET /api/competitions - List competitions</li>
                <li>PUT /api/competitions/{year}/weigh-ins/{week} - Submit a weigh-in</li>
                <li>GET /api/competitions/{year}/leaderboard - Leaderboard</li>
                <li><a href="/health">GET /health</a> - Health check</li>
                <li><a href="/docs">API Documentation</a></li>
            </ul>
        </body>
        </html>
        """,
        status_code=200
    )


@app.get("/health")
async def health(
    db: DatabaseInterface = Depends(get_db),
    identity: IdentityProvider = Depends(get_identity),
):
    """Health check endpoint."""
    healthy = db.health_check()
    return {
        "status": "ok" if healthy else "degraded",
        "database": db.get_stats() if healthy else None,
        "database_size_mb": round(db.get_database_size() / (1024 * 1024), 2),
        "auth": identity.stats(),
    }


# Run with: uvicorn challenge.main:app --reload
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=config.HOST, port=config.PORT)
