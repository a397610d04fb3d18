"""Canonical logging field names for structured Grove logs.

These constants define a stable key set for structured logs and context
propagation across the SDK and its shared helpers.
"""

TIMESTAMP = "timestamp"
LEVEL = "level"
LOGGER = "logger"
MESSAGE = "message"
EVENT = "event"

# Public API invocation fields.
COMPONENT_ID = "component_id"
API_NAME = "api_name"
PUBLIC_API_INVOCATION_EVENT = "public_api_invocation"
PUBLIC_API_COMPLETION_EVENT = "public_api_completion"
SUCCESS = "success"
DURATION_MS = "duration_ms"
ERRORS = "errors"

# Storage request fields.
STORAGE_KEY = "storage_key"
METHOD = "method"
URL = "url"
STATUS = "status"
PROGRESS = "progress"
ACTION = "action"

# Common service-level fields.
SERVICE = "service"
ENVIRONMENT = "environment"
