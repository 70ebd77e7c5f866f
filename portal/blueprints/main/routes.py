from flask import current_app, render_template, request, redirect, send_from_directory, url_for
from flask_login import current_user, logout_user
from . import bp
from ...services.search import search as run_search
from ...services.storage import resolve_path


@bp.get("/")
def index():
    return render_template("home.html", user=current_user)


@bp.get("/login")
def login():
    return render_template("login.html", user=current_user)


@bp.get("/register")
def register():
    return render_template("register.html", user=current_user)


@bp.get("/search")
def search():
    query = request.args.get("query", "")
    results = run_search(query)
    if results.empty:
        return "No users or files found", 404, {"Content-Type": "text/plain; charset=utf-8"}
    return render_template("search_results.html", users=results.users, files=results.files,
                           query=query.strip(), user=current_user)


@bp.get("/logout")
def logout():
    logout_user()
    return redirect(url_for("main.index"))


@bp.get("/uploads/<filename>")
def uploaded(filename):
    # profile pictures only; repository files go through /files/download
    return send_from_directory(resolve_path(current_app.config["UPLOAD_DIR"]), filename)
