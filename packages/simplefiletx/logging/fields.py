"""Structured logging field names used by the file transport."""

TIMESTAMP = "timestamp"
LEVEL = "level"
LOGGER = "logger"
MESSAGE = "message"
EVENT = "event"

# Request fields.
METHOD = "method"
URL = "url"
PATH = "path"
CONTENT_LENGTH = "content_length"
LENGTH_SOURCE = "length_source"
ERROR = "error"
ERROR_TYPE = "error_type"

# Events.
FILE_RESPONSE_EVENT = "file_response"
FILE_REQUEST_FAILED_EVENT = "file_request_failed"

# Common service-level fields.
SERVICE = "service"
ENVIRONMENT = "environment"

# Order of request fields in rendered output; unlisted fields follow sorted.
REQUEST_FIELDS = (
    EVENT,
    METHOD,
    URL,
    PATH,
    CONTENT_LENGTH,
    LENGTH_SOURCE,
    ERROR_TYPE,
    ERROR,
)
