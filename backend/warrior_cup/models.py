from datetime import datetime, timezone

from flask_login import UserMixin

from warrior_cup import db

ADMIN = 'admin'
PLAYER = 'player'
ROLES = (ADMIN, PLAYER)


def _utcnow():
    return datetime.now(timezone.utc)


class Record(db.Model):
    """One JSON document stored under a slash separated path."""
    __tablename__ = 'record'
    path = db.Column(db.String(255), primary_key=True)
    value = db.Column(db.Text, nullable=False)  # JSON-encoded document
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    def to_dict(self):
        return {
            'path': self.path,
            'value': self.value,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }


class Participant(UserMixin):
    """Session principal for someone who joined a tournament with a passcode.

    Not persisted: the Flask-Login id is ``"<tournament_id>:<role>"`` and the
    principal is rebuilt from it on every request.
    """

    def __init__(self, tournament_id: str, role: str):
        self.tournament_id = tournament_id
        self.role = role

    def get_id(self):
        return f"{self.tournament_id}:{self.role}"

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN

    def can_access(self, tournament_id: str) -> bool:
        return self.tournament_id == (tournament_id or '').upper()

    @classmethod
    def from_id(cls, participant_id):
        tournament_id, _, role = (participant_id or '').partition(':')
        if not tournament_id or role not in ROLES:
            return None
        return cls(tournament_id, role)

    def to_dict(self):
        return {
            'tournament_id': self.tournament_id,
            'role': self.role,
        }
