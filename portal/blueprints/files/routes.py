import click
from flask import current_app, render_template, request, redirect, send_file, url_for, flash
from flask_login import login_required, current_user
from sqlalchemy.exc import SQLAlchemyError
from . import bp
from .forms import FileUploadForm, DeleteFileForm
from ...exceptions import NoFileProvidedError, StorageError, UnsupportedFileTypeError
from ...services import files as repository
from ...services.storage import resolve_path


@bp.get("")
@login_required
def list_files():
    try:
        items = repository.list_for_owner(current_user.id)
    except SQLAlchemyError:
        current_app.logger.exception("Error retrieving files")
        return redirect(url_for("profile.show"))
    return render_template("files/list.html", user=current_user, files=items, delete_form=DeleteFileForm())


@bp.route("/upload", methods=["GET", "POST"])
@login_required
def upload():
    form = FileUploadForm()
    if request.method == "GET":
        return render_template("files/upload.html", user=current_user, form=form)
    if not form.validate_on_submit():
        return redirect(url_for("files.upload"))

    try:
        repository.upload(
            current_user.id,
            request.files.get("file"),
            description=form.file_description.data,
            raw_tags=form.file_tags.data,
        )
    except NoFileProvidedError as e:
        return e.message, 400, {"Content-Type": "text/plain; charset=utf-8"}
    except UnsupportedFileTypeError as e:
        current_app.logger.warning("Upload rejected for %s: %r (%s)", current_user.email, e.filename, e.mimetype)
        flash(e.message, "warning")
        return redirect(url_for("files.upload"))
    except (StorageError, SQLAlchemyError):
        current_app.logger.exception("Error uploading file")
        return redirect(url_for("files.upload"))
    return redirect(url_for("files.list_files"))


@bp.post("/delete/<int:file_id>")
@login_required
def delete(file_id):
    form = DeleteFileForm()
    if not form.validate_on_submit():
        return redirect(url_for("files.list_files"))
    try:
        repository.delete(current_user.id, file_id)
    except SQLAlchemyError:
        return "Error deleting file.", 500, {"Content-Type": "text/plain; charset=utf-8"}
    return redirect(url_for("files.list_files"))


@bp.get("/download/<int:file_id>")
@login_required
def download(file_id):
    f = repository.get_for_download(file_id)
    return send_file(resolve_path(f.file_path), as_attachment=True, download_name=f.file_name)


@bp.cli.command("sweep-orphans")
@click.option("--dry-run", is_flag=True, help="List orphaned files without removing them.")
def sweep_orphans(dry_run):
    """Remove stored files that no metadata row points at."""
    removed = repository.sweep_orphans(dry_run=dry_run)
    for path in removed:
        click.echo(("would remove " if dry_run else "removed ") + path)
    click.echo(f"{len(removed)} orphaned file(s) {'found' if dry_run else 'removed'}.")
