MODULE_ID = "maintenance"
MODULE_VERSION = "1.0.0"
MODULE_DESCRIPTION = "Recurring maintenance schedules, completions, change log, and projected occurrences"

ROUTES = [
    "maintenance.routes",
]

TABLES = [
    "maintenance_schedules",
    "maintenance_completions",
    "maintenance_change_logs",
]

PUBLISHES = [
    "maintenance.schedule_created",
    "maintenance.schedule_updated",
    "maintenance.schedule_deleted",
    "maintenance.completed",
    "asset.status_changed",
]

SUBSCRIBES = []

IMPLEMENTS = []

REQUIRES = ["AssetStatusProvider"]

DAEMONS = []


def register(app, registry) -> None:
    """Register the maintenance module routes."""
    from modules.maintenance import routes

    app.include_router(routes.router, prefix="/api")
    app.include_router(routes.router, prefix="/api/v1")
