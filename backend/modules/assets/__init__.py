MODULE_ID = "assets"
MODULE_VERSION = "1.0.0"
MODULE_DESCRIPTION = "Maintainable assets and their operational status"

ROUTES = [
    "assets.routes",
]

TABLES = [
    "assets",
]

PUBLISHES = []

SUBSCRIBES = []

IMPLEMENTS = ["AssetStatusProvider"]

REQUIRES = []

DAEMONS = []


def register(app, registry) -> None:
    """Register the assets module: routes and AssetStatusProvider."""
    from modules.assets import routes
    from modules.assets.services import AssetStatusService

    app.include_router(routes.router, prefix="/api")
    app.include_router(routes.router, prefix="/api/v1")

    registry.register_provider("AssetStatusProvider", AssetStatusService())
