"""
Sign-in, sign-up and sign-out pages.
"""

from typing import Dict, Optional

from fastapi import APIRouter, Query, Request
from fastapi.responses import HTMLResponse, Response

from ..auth import auth_provider, end_session, get_session, public_only, start_session
from ..exceptions import AuthenticationRequired
from ..logging_config import get_logger
from ..metrics import track_login_attempt, track_page_view
from ..sample_data import DEMO_CREDENTIALS
from ..templating import read_form, redirect, render
from ..validators import validate_login_form, validate_registration_form

logger = get_logger(__name__)

router = APIRouter(tags=["Auth"])

DASHBOARD_URL = "/dashboard"


def _login_page(
    request: Request,
    form: Optional[Dict[str, str]] = None,
    errors: Optional[Dict[str, str]] = None,
    status_code: int = 200,
) -> HTMLResponse:
    return render(
        request,
        "login.html",
        {
            "form": form or {},
            "errors": errors or {},
            "demo_credentials": DEMO_CREDENTIALS,
        },
        status_code=status_code,
    )


def _without_password(form: Dict[str, str]) -> Dict[str, str]:
    return {key: value for key, value in form.items() if key != "password"}


@router.get("/login", response_class=HTMLResponse)
async def login_page(
    request: Request,
    demo: Optional[str] = Query(None, description="Prefill demo credentials (user|admin)"),
) -> Response:
    signed_in = public_only(request)
    if signed_in is not None:
        return signed_in

    track_page_view("login")
    return _login_page(request, form=DEMO_CREDENTIALS.get(demo or "", {}))


@router.post("/login")
async def login(request: Request) -> Response:
    signed_in = public_only(request)
    if signed_in is not None:
        return signed_in

    form = await read_form(request)
    errors = validate_login_form(form)
    if errors:
        track_login_attempt("login", success=False)
        return _login_page(request, form=_without_password(form), errors=errors, status_code=400)

    try:
        user = auth_provider.login(form["email"], form["password"])
    except AuthenticationRequired:
        track_login_attempt("login", success=False)
        return _login_page(
            request,
            form=_without_password(form),
            errors={"form": "Login failed. Please try again."},
            status_code=400,
        )

    track_login_attempt("login", success=True)
    response = redirect(DASHBOARD_URL)
    session = start_session(response, user)
    session.toast("success", "Login successful!")
    return response


@router.get("/register", response_class=HTMLResponse)
async def register_page(request: Request) -> Response:
    signed_in = public_only(request)
    if signed_in is not None:
        return signed_in

    track_page_view("register")
    return render(request, "register.html", {"form": {}, "errors": {}})


@router.post("/register")
async def register(request: Request) -> Response:
    """
    Create an account and sign it in.

    Validation errors re-render the form with every field error and
    keep what the user typed, except the passwords.
    """
    signed_in = public_only(request)
    if signed_in is not None:
        return signed_in

    form = await read_form(request)
    errors = validate_registration_form(form)
    if errors:
        track_login_attempt("register", success=False)
        kept = {k: v for k, v in form.items() if k not in ("password", "confirm_password")}
        return render(
            request,
            "register.html",
            {"form": kept, "errors": errors},
            status_code=400,
        )

    user = auth_provider.register(form)
    track_login_attempt("register", success=True)

    response = redirect(DASHBOARD_URL)
    session = start_session(response, user)
    session.toast("success", "Account created successfully!")
    return response


@router.post("/logout")
async def logout(request: Request) -> Response:
    session = get_session(request)
    response = redirect("/login")
    end_session(response, session)
    if session is not None:
        logger.info(
            "User signed out",
            extra={"extra_fields": {"username": session.user.username}},
        )
    return response
