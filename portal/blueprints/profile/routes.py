from flask import current_app, render_template, request, redirect, url_for, flash
from flask_login import login_required, current_user
from . import bp
from .forms import ProfileForm, ProfilePictureForm
from ...exceptions import DirectoryError, NoFileProvidedError, StorageError, UnsupportedFileTypeError
from ...services import directory, storage
from ...services.files import validate_upload


@bp.get("")
@login_required
def show():
    return render_template("profile/profile.html", user=current_user, current_user=current_user)


@bp.route("/edit", methods=["GET", "POST"])
@login_required
def edit():
    form = ProfileForm(obj=current_user)
    picture_form = ProfilePictureForm()
    if request.method == "GET":
        return render_template("profile/edit.html", user=current_user, form=form, picture_form=picture_form)

    if not form.validate_on_submit():
        flash("Name and surname are required.", "warning")
        return redirect(url_for("profile.edit"))
    try:
        directory.update_profile(current_user.id, form.name.data, form.surname.data, form.bio.data or "")
    except DirectoryError as e:
        current_app.logger.error("Error updating profile: %s", e.message)
    return redirect(url_for("profile.show"))


@bp.post("/edit/upload")
@login_required
def upload_picture():
    form = ProfilePictureForm()
    if not form.validate_on_submit():
        return redirect(url_for("profile.edit"))

    picture = request.files.get("profilePicture")
    try:
        validate_upload(picture)
        path = storage.save_upload(picture, current_app.config["UPLOAD_DIR"])
        directory.update_profile_picture(current_user.id, path)
    except (NoFileProvidedError, UnsupportedFileTypeError) as e:
        current_app.logger.warning("Profile picture rejected for %s: %s", current_user.email, e.message)
        flash(e.message, "warning")
        return redirect(url_for("profile.edit"))
    except (StorageError, DirectoryError) as e:
        current_app.logger.error("Error updating profile picture: %s", e.message)
        return redirect(url_for("profile.edit"))
    return redirect(url_for("profile.show"))
