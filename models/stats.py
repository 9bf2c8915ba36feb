# models/stats.py
from extensions import db
from models import utcnow, isoformat


class UserStats(db.Model):
    __tablename__ = "stats"
    user_id = db.Column(db.String(64), primary_key=True)
    generated = db.Column(db.Integer, nullable=False, default=0)
    downloaded = db.Column(db.Integer, nullable=False, default=0)
    last_activity = db.Column(db.DateTime, default=utcnow)

    def to_dict(self):
        return {
            "userId": self.user_id,
            "generated": self.generated,
            "downloaded": self.downloaded,
            "lastActivity": isoformat(self.last_activity),
        }
