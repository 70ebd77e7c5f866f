import secrets

from flask import current_app, redirect, request, session, url_for, flash
from flask_login import login_user
from . import bp
from ...extensions import csrf
from ...exceptions import AuthError, DirectoryError
from ...services import directory
from ...services.oidc import get_oidc_client


@bp.get("/azuread")
def azuread():
    state = secrets.token_urlsafe(16)
    nonce = secrets.token_urlsafe(16)
    session["oidc_state"] = state
    session["oidc_nonce"] = nonce
    try:
        return redirect(get_oidc_client().authorization_url(state, nonce))
    except AuthError as e:
        current_app.logger.error("Could not start sign-in: %s", e.message)
        flash("Sign-in is currently unavailable.", "danger")
        return redirect(url_for("main.login"))


@bp.post("/azuread/callback")
@csrf.exempt
def azuread_callback():
    expected_state = session.pop("oidc_state", None)
    nonce = session.pop("oidc_nonce", None)

    error = request.form.get("error")
    if error:
        current_app.logger.warning("Identity provider returned %s: %s", error, request.form.get("error_description"))
        flash("Sign-in was cancelled or refused.", "danger")
        return redirect(url_for("main.login"))

    try:
        if not expected_state or request.form.get("state") != expected_state:
            raise AuthError("invalid_state")
        code = request.form.get("code")
        if not code:
            raise AuthError("missing_code")
        client = get_oidc_client()
        tokens = client.exchange_code(code)
        claims = client.decode_id_token(tokens["id_token"], nonce=nonce)
        user = directory.authenticate(claims, current_app.config["ALLOWED_EMAIL_DOMAINS"])
    except AuthError as e:
        current_app.logger.warning("Authentication failed (%s): %s", e.code, e.message)
        flash("Sign in with your institutional account.", "danger")
        return redirect(url_for("main.login"))
    except DirectoryError as e:
        current_app.logger.error("Login error: %s", e.message)
        return redirect(url_for("main.login"))

    login_user(user)
    return redirect(url_for("main.index"))
