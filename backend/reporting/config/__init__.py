from .activities import (
    ACTIVITY_CATEGORIES,
    HEALTH_CENTER_ACTIVITIES,
    HOSPITAL_ACTIVITIES,
    Activity,
)

# Idle-independent autosave delay, measured from the most recent edit.
AUTOSAVE_DELAY_SECONDS: float = 30.0

# Drafts older than this are treated as absent.
DRAFT_RETENTION_HOURS: int = 24

# Key token used when a selection part is unset.
DEFAULT_KEY_TOKEN: str = "default"

DRAFT_KEY_PREFIX: str = "financial_form"

# Notifications kept per session until a client drains them.
NOTIFICATION_LOG_SIZE: int = 50

LEAVE_CONFIRMATION_MESSAGE: str = "You have unsaved changes. Are you sure you want to leave?"
