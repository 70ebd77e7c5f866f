from ..extensions import db
from flask_login import UserMixin
from .base import CreatedAtMixin


class User(db.Model, UserMixin, CreatedAtMixin):
    __tablename__ = "users"
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    microsoft_id = db.Column(db.String(255))
    name = db.Column(db.String(120), nullable=False, default="Unknown")
    surname = db.Column(db.String(120), nullable=False, default="Unknown")
    bio = db.Column(db.Text, nullable=False, default="")
    profile_picture = db.Column(db.String(512), nullable=True)

    files = db.relationship("File", back_populates="uploader", lazy="dynamic")

    @property
    def full_name(self):
        return f"{self.name} {self.surname}"

    def __repr__(self):
        return f"<User {self.id} {self.email}>"
