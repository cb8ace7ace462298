# core/events.py — canonical event type definitions
# Mutating maintenance operations publish these so callers can refresh any
# cached schedule/completion lists they hold. The core keeps no cache itself.

# Schedule definition events
SCHEDULE_CREATED = "maintenance.schedule_created"     # {schedule_id, asset_id, changed_by}
SCHEDULE_UPDATED = "maintenance.schedule_updated"     # {schedule_id, fields, changed_by}
SCHEDULE_DELETED = "maintenance.schedule_deleted"     # {schedule_id, asset_id, changed_by}

# Completion events
MAINTENANCE_COMPLETED = "maintenance.completed"       # {schedule_id, completion_id, completed_date}

# Asset events
ASSET_STATUS_CHANGED = "asset.status_changed"         # {asset_id, old_status, new_status, schedule_id}
