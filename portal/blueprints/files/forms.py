from flask_wtf import FlaskForm
from flask_wtf.file import FileField
from wtforms import StringField, TextAreaField, SubmitField


class FileUploadForm(FlaskForm):
    file = FileField("File")
    file_description = TextAreaField("Description", render_kw={"rows": 3})
    file_tags = StringField("Tags (comma separated)")
    submit = SubmitField("Upload")


class DeleteFileForm(FlaskForm):
    submit = SubmitField("Delete")
