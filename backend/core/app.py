# core/app.py — App factory with dynamic module discovery
#
# Creates and configures the FastAPI application. Discovers all modules under
# backend/modules/, resolves load order from REQUIRES/IMPLEMENTS declarations,
# and calls each module's register(app, registry) function.
#
# main.py becomes: from core.app import create_app; app = create_app()

import hmac
import importlib
import logging
import pathlib
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from core.errors import DomainError

log = logging.getLogger("upkeep.api")

# ---------------------------------------------------------------------------
# Version
# ---------------------------------------------------------------------------

_version_file = pathlib.Path(__file__).parent.parent.parent / "VERSION"
if _version_file.exists():
    __version__ = _version_file.read_text().strip()
else:
    __version__ = "1.0.0"


# ---------------------------------------------------------------------------
# Module discovery helpers
# ---------------------------------------------------------------------------

def _discover_modules() -> list[str]:
    """Return a list of module package names found under backend/modules/.

    A valid module directory contains an __init__.py with a MODULE_ID attribute.
    """
    modules_dir = pathlib.Path(__file__).parent.parent / "modules"
    found = []
    for entry in sorted(modules_dir.iterdir()):
        if not entry.is_dir():
            continue
        init_file = entry / "__init__.py"
        if not init_file.exists():
            continue
        pkg_name = f"modules.{entry.name}"
        try:
            mod = importlib.import_module(pkg_name)
            if hasattr(mod, "MODULE_ID"):
                found.append(pkg_name)
        except ImportError as exc:
            log.warning(f"Module discovery: skipping {pkg_name!r}: {exc}")
    return found


def _resolve_load_order(pkg_names: list[str]) -> list[str]:
    """Topologically sort modules so that providers load before their consumers.

    Algorithm:
    1. Build a map of interface_name -> module_pkg for IMPLEMENTS declarations.
    2. For each module's REQUIRES list, find which module pkg provides that interface.
    3. Perform Kahn's topological sort (no-dependency modules first).
    4. Any modules with circular or unresolvable deps load in discovery order at
       the end (with a warning) rather than crashing startup.
    """
    mods: dict[str, dict] = {}
    for pkg in pkg_names:
        m = importlib.import_module(pkg)
        mods[pkg] = {
            "implements": getattr(m, "IMPLEMENTS", []),
            "requires": getattr(m, "REQUIRES", []),
        }

    # interface -> providing pkg
    providers: dict[str, str] = {}
    for pkg, info in mods.items():
        for iface in info["implements"]:
            providers[iface] = pkg

    # pkg -> set of pkgs it depends on
    edges: dict[str, set[str]] = {pkg: set() for pkg in pkg_names}
    for pkg, info in mods.items():
        for iface in info["requires"]:
            provider_pkg = providers.get(iface)
            if provider_pkg and provider_pkg != pkg:
                edges[pkg].add(provider_pkg)

    in_degree: dict[str, int] = {pkg: len(deps) for pkg, deps in edges.items()}

    queue = sorted(pkg for pkg in pkg_names if in_degree[pkg] == 0)
    ordered: list[str] = []

    while queue:
        pkg = queue.pop(0)
        ordered.append(pkg)
        for other_pkg, deps in edges.items():
            if pkg in deps:
                in_degree[other_pkg] -= 1
                if in_degree[other_pkg] == 0:
                    queue.append(other_pkg)
                    queue.sort()

    remaining = [pkg for pkg in pkg_names if pkg not in ordered]
    if remaining:
        log.warning(
            f"Module load order: circular or unresolvable dependencies for "
            f"{remaining}; appending in discovery order."
        )
        ordered.extend(remaining)

    return ordered


def _import_models(pkg_names: list[str]) -> None:
    """Import each module's models so create_all() sees every table."""
    for pkg in pkg_names:
        try:
            importlib.import_module(f"{pkg}.models")
        except ModuleNotFoundError as exc:
            if exc.name != f"{pkg}.models":
                raise


# ---------------------------------------------------------------------------
# Error handlers
# ---------------------------------------------------------------------------

def _register_error_handlers(app: FastAPI) -> None:
    """Map domain errors raised by services to JSON responses."""

    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError):
        if exc.status_code >= 500:
            log.error(f"{request.method} {request.url.path}: {exc.message}")
        else:
            log.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# ---------------------------------------------------------------------------
# Middleware setup
# ---------------------------------------------------------------------------

def _setup_middleware(app: FastAPI) -> None:
    """Attach CORS and rate limiting to the app."""
    from core.config import settings
    from core.rate_limit import limiter
    from slowapi import _rate_limit_exceeded_handler
    from slowapi.errors import RateLimitExceeded

    # Rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # CORS
    _cors_origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
    if "*" in _cors_origins:
        log.warning(
            "CORS origin '*' is incompatible with allow_credentials=True; "
            "falling back to empty origins list. Set explicit origins in CORS_ORIGINS."
        )
        _cors_origins = []

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "X-API-Key", "X-User-Id", "Accept"],
    )


def _register_http_middleware(app: FastAPI) -> None:
    """Register @app.middleware("http") handlers for security headers and auth."""
    from core.config import settings

    _CSP_SKIP_PREFIXES = (
        "/api/docs", "/api/redoc", "/api/v1/docs", "/api/v1/redoc", "/openapi.json"
    )
    _CSP_DIRECTIVES = "; ".join([
        "default-src 'self'",
        "script-src 'self'",
        "style-src 'self' 'unsafe-inline'",
        "img-src 'self' data:",
        "connect-src 'self'",
        "object-src 'none'",
        "base-uri 'self'",
    ])

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        """Attach CSP and other security headers to every response."""
        response = await call_next(request)
        if not any(request.url.path.startswith(p) for p in _CSP_SKIP_PREFIXES):
            response.headers["Content-Security-Policy"] = _CSP_DIRECTIVES
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response

    @app.middleware("http")
    async def authenticate_request(request: Request, call_next):
        """Require X-API-Key on API routes when an API key is configured."""
        if (
            not settings.api_key
            or request.url.path == "/health"
            or request.method == "OPTIONS"
            or not request.url.path.startswith("/api/")
        ):
            return await call_next(request)

        api_key = request.headers.get("X-API-Key")
        if not api_key or not hmac.compare_digest(api_key, settings.api_key):
            return JSONResponse(
                status_code=401,
                content={"detail": "Invalid or missing API key"},
            )

        return await call_next(request)


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------

def create_app() -> FastAPI:
    """Create and fully configure the Upkeep FastAPI application.

    1. Discover all modules under backend/modules/.
    2. Resolve load order by REQUIRES/IMPLEMENTS declarations.
    3. Call each module's register(app, registry) so routes and providers
       exist before the first request arrives.
    4. Create FastAPI instance with lifespan (DB init, dependency check).
    5. Attach middleware, CORS, and domain error handlers.

    Returns the fully configured app object. Uvicorn finds it via main:app.
    """
    from core.config import settings
    from core.db import engine, Base
    from core.registry import registry

    pkg_names = _discover_modules()
    ordered_pkgs = _resolve_load_order(pkg_names)
    _import_models(ordered_pkgs)

    log.info(f"Module load order: {[p.split('.')[-1] for p in ordered_pkgs]}")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        Base.metadata.create_all(bind=engine)

        # Validate all declared dependencies are satisfied
        registry.validate_dependencies()

        if not settings.api_key:
            log.warning(
                "API_KEY is not set; perimeter authentication is DISABLED. "
                "Set API_KEY in your environment for production use."
            )
        yield

    app = FastAPI(
        title="Upkeep",
        description="Recurring maintenance scheduling for physical assets",
        version=__version__,
        lifespan=lifespan,
        docs_url="/api/v1/docs",
        redoc_url="/api/v1/redoc",
    )

    # Middleware (order matters: added in reverse call order for ASGI stack)
    _setup_middleware(app)
    _register_http_middleware(app)
    _register_error_handlers(app)

    @app.get("/health", tags=["System"], include_in_schema=False)
    def health():
        """Liveness plus a trivial database round trip."""
        db_ok = True
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except Exception:
            log.warning("Health check: database unreachable", exc_info=True)
            db_ok = False
        return {
            "status": "ok" if db_ok else "degraded",
            "version": __version__,
            "database": "ok" if db_ok else "unreachable",
            "modules": [p.split(".")[-1] for p in ordered_pkgs],
        }

    for pkg in ordered_pkgs:
        mod = importlib.import_module(pkg)
        # Record REQUIRES for dependency validation (done at startup)
        registry.record_requires(
            getattr(mod, "MODULE_ID", pkg),
            getattr(mod, "REQUIRES", []),
        )
        if hasattr(mod, "register"):
            mod.register(app, registry)
            log.debug(f"Registered module: {pkg}")

    return app
