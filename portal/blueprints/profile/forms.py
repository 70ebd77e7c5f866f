from flask_wtf import FlaskForm
from flask_wtf.file import FileField
from wtforms import StringField, TextAreaField, SubmitField
from wtforms.validators import InputRequired, Length


class ProfileForm(FlaskForm):
    name = StringField("Name", validators=[InputRequired(), Length(max=120)])
    surname = StringField("Surname", validators=[InputRequired(), Length(max=120)])
    bio = TextAreaField("Bio", render_kw={"rows": 4})
    submit = SubmitField("Save")


class ProfilePictureForm(FlaskForm):
    profilePicture = FileField("Profile picture")
    submit = SubmitField("Upload")
