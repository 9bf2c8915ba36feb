# models/file.py
import uuid

from extensions import db
from models import utcnow, isoformat

FILE_TYPES = ("report", "certificate")


class StoredFile(db.Model):
    """A report or certificate in the shared repository.

    The owner columns are a snapshot taken when the file is created; they are
    not kept in sync with the user row and survive the owner's deletion.
    """
    __tablename__ = "files"
    id = db.Column(db.String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
    user_id = db.Column(db.String(64), nullable=False, index=True)
    username = db.Column(db.String(120), nullable=False)
    user_role = db.Column(db.String(20), nullable=False)
    user_designation = db.Column(db.String(20), nullable=True)
    title = db.Column(db.String(255), nullable=False)
    type = db.Column(db.String(20), nullable=False)
    category = db.Column(db.String(120), nullable=True)
    signature = db.Column(db.JSON(none_as_null=True), nullable=True)  # {"name": ..., "title": ...}
    content = db.Column(db.Text, nullable=False)
    report_date = db.Column(db.String(64), nullable=True)
    images = db.Column(db.JSON(none_as_null=True), nullable=True)  # [{"base64": ..., "mimeType": ...}]
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)
    downloads_count = db.Column(db.Integer, nullable=False, default=0)

    __table_args__ = (
        db.CheckConstraint("type IN ('report', 'certificate')", name="ck_files_type"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "userId": self.user_id,
            "username": self.username,
            "userRole": self.user_role,
            "userDesignation": self.user_designation,
            "title": self.title,
            "type": self.type,
            "category": self.category,
            "signature": self.signature,
            "content": self.content,
            "reportDate": self.report_date,
            "images": self.images,
            "createdAt": isoformat(self.created_at),
            "downloadsCount": self.downloads_count,
        }

    def __repr__(self):
        return f"<StoredFile {self.id} {self.type} owner={self.user_id}>"
