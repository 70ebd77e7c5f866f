from ..extensions import db


class File(db.Model):
    __tablename__ = "files"

    file_id = db.Column(db.Integer, primary_key=True)
    file_name = db.Column(db.String(255), nullable=False)  # original upload filename
    file_path = db.Column(db.String(512), nullable=False)  # relative to the working directory
    uploader_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    description = db.Column(db.Text, nullable=False, default="")
    upload_date = db.Column(db.DateTime, server_default=db.func.now(), nullable=False)

    uploader = db.relationship("User", back_populates="files")
    tag_rows = db.relationship(
        "FileTag",
        order_by="FileTag.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def id(self):
        return self.file_id

    @property
    def tags(self):
        return [t.name for t in self.tag_rows]

    @tags.setter
    def tags(self, names):
        self.tag_rows = [FileTag(position=i, name=n) for i, n in enumerate(names)]

    def __repr__(self):
        return f"<File {self.file_id} {self.file_name!r}>"


class FileTag(db.Model):
    __tablename__ = "file_tags"

    id = db.Column(db.Integer, primary_key=True)
    file_id = db.Column(db.Integer, db.ForeignKey("files.file_id", ondelete="CASCADE"), nullable=False, index=True)
    position = db.Column(db.Integer, nullable=False, default=0)
    name = db.Column(db.String(255), nullable=False, index=True)
