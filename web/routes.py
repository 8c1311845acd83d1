"""
web/routes.py -- Jinja2 + htmx routes for the HtmxTodo web UI.

Every mutating route is protected by verify_csrf (router-level dependency).
Every /app route is protected by _require_login().

Status codes are part of the htmx contract with static/application.js:
  422 -- validation failure; the body is a fragment that replaces the form
         (the glue forces htmx to swap it instead of discarding it)
  204 -- successful DELETE; the empty body replaces the card, removing it

Redirects: plain browser requests get a 302. htmx requests (HX-Request: true)
cannot observe a 302 -- the XHR follows it silently -- so they get a 200 with
an HX-Location header instead, which htmx turns into a client-side navigation.

Sign-in, registration and confirmation POSTs carry the limit_credentials
rate limit. The decorator sits BELOW @router.post: FastAPI must register the
slowapi wrapper, because SlowAPIMiddleware skips decorated routes and leaves
the check to the wrapper. No `from __future__ import annotations` here: the
wrapper's globals are slowapi's, so string annotations would not resolve.

Routes:
  GET    /                       -- 302 to /login
  GET    /favicon.ico            -- 204, no icon shipped
  GET    /login                  -- sign-in form (302 to /app/lists if signed in)
  POST   /login                  -- SRP sign-in against Cognito
  POST   /logout                 -- clear session
  GET    /register               -- registration form
  POST   /register               -- Cognito SignUp
  GET    /register/confirm       -- confirmation-code form
  POST   /register/confirm       -- Cognito ConfirmSignUp
  GET    /app/lists              -- all lists + create form
  POST   /app/lists              -- htmx: create, returns form + OOB card
  GET    /app/lists/{id}/edit    -- htmx: card in rename mode
  PATCH  /app/lists/{id}         -- htmx: rename, returns card
  DELETE /app/lists/{id}         -- htmx: delete, 204
"""

import logging
from typing import Optional
from urllib.parse import quote

import requests
from fastapi import APIRouter, Depends, Form, Request, Response
from fastapi.responses import HTMLResponse, RedirectResponse

from api.limiter import limit_credentials
from auth.cognito import CognitoAuth
from auth.dependencies import verify_csrf
from auth.models import Identity, InvalidCredentialsError, RegistrationError
from auth.session import is_logged_in, log_in, log_out
from auth.tokens import decode_id_token, get_jwks, identity_from_claims, issuer_for
from core.config import get_settings
from lists.models import TodoList
from lists.store import ListStore
from web.templating import templates
from web.views import Card

logger = logging.getLogger("htmxtodo.web")

router = APIRouter(dependencies=[Depends(verify_csrf)])

_settings = get_settings()

# Whitelist for ?notice= on /login. The raw query param is NEVER passed to
# templates -- only the message from this dict is.
_NOTICES: dict[str, str] = {
    "confirmed": "Your email address is confirmed. You can sign in now.",
    "signed_out": "You have been signed out.",
}

_MIN_PASSWORD_LENGTH = 8


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _is_htmx(request: Request) -> bool:
    return request.headers.get("HX-Request") == "true"


def _redirect(request: Request, url: str) -> Response:
    """Redirect in a way both plain browsers and htmx understand."""
    if _is_htmx(request):
        return Response(status_code=200, headers={"HX-Location": url})
    resp = RedirectResponse(url, status_code=302)
    resp.headers["HX-Location"] = url
    return resp


def _require_login(request: Request) -> Optional[Response]:
    """Return a redirect to /login for anonymous requests, None if signed in.

    Call at the top of protected route handlers:
        if redirect := _require_login(request):
            return redirect
    """
    if not is_logged_in(request):
        logger.info("Not signed in, redirecting %s %s to /login", request.method, request.url.path)
        return _redirect(request, "/login")
    return None


def _client_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None


def _identity_from_tokens(tokens: dict) -> Optional[Identity]:
    """Verify the IdToken from an AuthenticationResult and extract the Identity."""
    try:
        jwks = get_jwks(_settings.aws_region, _settings.cognito_user_pool_id)
    except requests.RequestException as exc:
        logger.error("Could not load Cognito signing keys: %s", exc)
        return None
    claims = decode_id_token(
        tokens["IdToken"],
        jwks,
        client_id=_settings.cognito_client_id,
        issuer=issuer_for(_settings.aws_region, _settings.cognito_user_pool_id),
        access_token=tokens.get("AccessToken"),
    )
    if claims is None:
        return None
    return identity_from_claims(claims)


def _store(request: Request) -> ListStore:
    return request.app.state.list_store


def _cognito(request: Request) -> CognitoAuth:
    return request.app.state.cognito


# ---------------------------------------------------------------------------
# GET / and /favicon.ico
# ---------------------------------------------------------------------------


@router.get("/")
def index(request: Request) -> RedirectResponse:
    return RedirectResponse("/login", status_code=302)


@router.get("/favicon.ico", include_in_schema=False)
def favicon() -> Response:
    return Response(status_code=204)


# ---------------------------------------------------------------------------
# Sign in / sign out
# ---------------------------------------------------------------------------


@router.get("/login", response_class=HTMLResponse)
def login_form(request: Request) -> Response:
    """Render the sign-in form. Signed-in users go straight to their lists."""
    if is_logged_in(request):
        return RedirectResponse("/app/lists", status_code=302)

    notice = _NOTICES.get(request.query_params.get("notice", ""))
    return templates.TemplateResponse(
        request,
        "login/login.html",
        {"email": "", "error_msg": None, "notice": notice},
    )


@router.post("/login", response_class=HTMLResponse)
@limit_credentials
def login_post(
    request: Request,
    email: str = Form(default=""),
    password: str = Form(default=""),
) -> Response:
    """Sign in with email and password via the Cognito SRP flow."""
    email = email.strip()

    def _failed(message: str) -> HTMLResponse:
        return templates.TemplateResponse(
            request,
            "login/login.html",
            {"email": email, "error_msg": message, "notice": None},
            status_code=422,
        )

    if not email or not password:
        return _failed("Email and password are required.")

    try:
        tokens = _cognito(request).authenticate(email, password)
    except InvalidCredentialsError as exc:
        return _failed(str(exc))

    identity = _identity_from_tokens(tokens)
    if identity is None:
        logger.error("Could not verify the ID token returned for %s", email)
        return _failed("Sign-in failed. Please try again.")

    log_in(request, identity)
    resp = _redirect(request, "/app/lists")
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.post("/logout")
def logout(request: Request) -> Response:
    """Clear the session and send the browser back to the sign-in form."""
    log_out(request)
    return _redirect(request, "/login?notice=signed_out")


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


@router.get("/register", response_class=HTMLResponse)
def register_form(request: Request) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "login/register.html",
        {"email": "", "error_msg": None},
    )


@router.post("/register", response_class=HTMLResponse)
@limit_credentials
def register_post(
    request: Request,
    email: str = Form(default=""),
    password: str = Form(default=""),
    password_confirmation: str = Form(default=""),
) -> Response:
    """Register with Cognito. Password policy is enforced by the user pool."""
    email = email.strip()

    def _failed(message: str) -> HTMLResponse:
        return templates.TemplateResponse(
            request,
            "login/register.html",
            {"email": email, "error_msg": message},
            status_code=422,
        )

    if not email:
        return _failed("Email is required.")
    if password != password_confirmation:
        return _failed("Passwords do not match.")
    if len(password) < _MIN_PASSWORD_LENGTH:
        return _failed(f"Password must be at least {_MIN_PASSWORD_LENGTH} characters.")

    try:
        _cognito(request).sign_up(email, password, ip_address=_client_ip(request))
    except RegistrationError as exc:
        return _failed(str(exc))

    return _redirect(request, f"/register/confirm?email={quote(email)}")


@router.get("/register/confirm", response_class=HTMLResponse)
def confirm_form(request: Request, email: str = "") -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "login/confirm.html",
        {"email": email, "error_msg": None},
    )


@router.post("/register/confirm", response_class=HTMLResponse)
@limit_credentials
def confirm_post(
    request: Request,
    email: str = Form(default=""),
    code: str = Form(default=""),
) -> Response:
    """Confirm a registration with the emailed code."""
    email = email.strip()
    code = code.strip()
    if not email or not code:
        return templates.TemplateResponse(
            request,
            "login/confirm.html",
            {"email": email, "error_msg": "Email and confirmation code are required."},
            status_code=422,
        )

    try:
        _cognito(request).confirm_sign_up(email, code)
    except RegistrationError as exc:
        return templates.TemplateResponse(
            request,
            "login/confirm.html",
            {"email": email, "error_msg": str(exc)},
            status_code=422,
        )

    return _redirect(request, "/login?notice=confirmed")


# ---------------------------------------------------------------------------
# Lists
# ---------------------------------------------------------------------------


@router.get("/app/lists", response_class=HTMLResponse)
def lists_index(request: Request) -> Response:
    if redirect := _require_login(request):
        return redirect

    cards = [Card(todo_list=t) for t in _store(request).filter_lists()]
    return templates.TemplateResponse(
        request,
        "lists/index.html",
        {"cards": cards, "new_list": TodoList(name=""), "error_msg": None},
    )


@router.post("/app/lists", response_class=HTMLResponse)
def lists_create(request: Request, name: str = Form(default="")) -> Response:
    """htmx: create a list. Returns a fresh form plus the new card out-of-band."""
    if redirect := _require_login(request):
        return redirect

    name = name.strip()
    if not name:
        return templates.TemplateResponse(
            request,
            "lists/create_failure.html",
            {"new_list": TodoList(name=name), "error_msg": "Name is required."},
            status_code=422,
        )

    created = _store(request).create_list(name)
    logger.info("Created list %d", created.id)
    return templates.TemplateResponse(
        request,
        "lists/create_success.html",
        {"card": Card(todo_list=created), "new_list": TodoList(name=""), "error_msg": None},
    )


@router.get("/app/lists/{list_id}/edit", response_class=HTMLResponse)
def lists_edit(request: Request, list_id: int) -> Response:
    """htmx: the card in rename mode."""
    if redirect := _require_login(request):
        return redirect

    todo_list = _store(request).get_list_by_id(list_id)
    return templates.TemplateResponse(
        request,
        "lists/card.html",
        {"card": Card(todo_list=todo_list, editing_name=True), "error_msg": None},
    )


@router.patch("/app/lists/{list_id}", response_class=HTMLResponse)
def lists_update(request: Request, list_id: int, name: str = Form(default="")) -> Response:
    """htmx: rename a list. An empty name re-renders the card in rename mode with 422."""
    if redirect := _require_login(request):
        return redirect

    store = _store(request)
    name = name.strip()
    if not name:
        todo_list = store.get_list_by_id(list_id)
        return templates.TemplateResponse(
            request,
            "lists/card.html",
            {"card": Card(todo_list=todo_list, editing_name=True), "error_msg": "Name is required."},
            status_code=422,
        )

    updated = store.update_list_by_id(list_id, name)
    return templates.TemplateResponse(
        request,
        "lists/card.html",
        {"card": Card(todo_list=updated), "error_msg": None},
    )


@router.delete("/app/lists/{list_id}")
def lists_delete(request: Request, list_id: int) -> Response:
    """htmx: delete a list. 204 with an empty body; the glue swaps it in."""
    if redirect := _require_login(request):
        return redirect

    _store(request).delete_list_by_id(list_id)
    logger.info("Deleted list %d", list_id)
    return Response(status_code=204)
