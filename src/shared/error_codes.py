# src/shared/error_codes.py
# Central mapping for the error contract.
# Keep keys stable: the web client switches on these.
ERROR_CODES = {
    # ─── Validation & Requests ──────────────────────────────────────────────
    "validation_error": {
        "http": 400,
        "message": "Validation failed for one or more fields."
    },
    "referential_error": {
        "http": 400,
        "message": "Referenced record does not exist."
    },
    "bad_request": {
        "http": 400,
        "message": "Bad request."
    },

    # ─── Authentication & Authorization ────────────────────────────────────
    "unauthorized": {
        "http": 401,
        "message": "Access token required."
    },
    "invalid_credentials": {
        "http": 401,
        "message": "Invalid credentials."
    },
    "invalid_token": {
        "http": 401,
        "message": "Invalid token."
    },
    "expired_token": {
        "http": 401,
        "message": "Token expired."
    },
    "account_inactive": {
        "http": 403,
        "message": "Account is not active. Please contact support."
    },
    "forbidden": {
        "http": 403,
        "message": "Insufficient permissions."
    },

    # ─── Lookups ────────────────────────────────────────────────────────────
    "not_found": {
        "http": 404,
        "message": "Resource not found."
    },
    "route_not_found": {
        "http": 404,
        "message": "Route not found."
    },
    "method_not_allowed": {
        "http": 405,
        "message": "Method not allowed."
    },

    # ─── Conflicts & lifecycle ─────────────────────────────────────────────
    "duplicate": {
        "http": 409,
        "message": "Duplicate entry."
    },
    "session_full": {
        "http": 409,
        "message": "Session is full."
    },
    "invalid_state": {
        "http": 409,
        "message": "Operation not allowed in the current state."
    },

    # ─── Rate Limiting ─────────────────────────────────────────────────────
    "rate_limited": {
        "http": 429,
        "message": "Too many requests, please try again later."
    },

    # ─── Infrastructure ────────────────────────────────────────────────────
    "internal_error": {
        "http": 500,
        "message": "Internal Server Error"
    },
    "external_service_error": {
        "http": 502,
        "message": "External service temporarily unavailable."
    },
    "storage_unavailable": {
        "http": 503,
        "message": "Database service unavailable."
    },
}
