"""
core/constants.py -- Names shared between the server, the templates, and
static/application.js.

The CSRF cookie and header names are read by the browser glue. Changing one
here without changing application.js breaks every mutating htmx request.
"""

ENV_DEVELOPMENT = "development"
ENV_PRODUCTION = "production"
ENV_TEST = "test"

APP_NAME = "HtmxTodo"
APP_VERSION = "0.1.0"

# ---------------------------------------------------------------------------
# CSRF
# ---------------------------------------------------------------------------

CSRF_COOKIE_NAME = "htmxtodo_csrf"
CSRF_HEADER_NAME = "X-CSRF-Token"
CSRF_FORM_FIELD = "_csrf"
CSRF_SESSION_KEY = "csrf.token"

# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------

SESSION_COOKIE_NAME = "htmxtodo_session_id"
SESSION_MAX_AGE = 30 * 24 * 60 * 60  # 30 days
LOGGED_IN_SESSION_KEY = "auth.logged_in"
EMAIL_SESSION_KEY = "auth.email"
SUBJECT_SESSION_KEY = "auth.sub"
