class ProjectStatus:
    CREATED = "CREATED"
    UPLOADING = "UPLOADING"
    UPLOADED = "UPLOADED"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class SessionCookies:
    # Supabase SSR stores the session as sb-<project-ref>-auth-token, split into
    # .0, .1, ... chunks once the serialized value exceeds the cookie size limit.
    AUTH_TOKEN_PREFIX = "sb-"
    AUTH_TOKEN_SUFFIX = "-auth-token"
    BASE64_PREFIX = "base64-"
    LEGACY_ACCESS_TOKEN = "sb-access-token"


class BackendErrorCodes:
    # PostgREST code for .single() when the result is not exactly one row.
    SINGLE_ROW = "PGRST116"
    # Postgres invalid_text_representation, e.g. a malformed uuid
    INVALID_INPUT = "22P02"
    CONNECTION = "CONNECTION"
    UNKNOWN = "UNKNOWN"


class ErrorMessages:
    UNAUTHORIZED = "Unauthorized"
    SINGLE_ROW = "JSON object requested, multiple (or no) rows returned"
    INVALID_BODY = "Invalid request body"
    INTERNAL = "Internal Server Error"
