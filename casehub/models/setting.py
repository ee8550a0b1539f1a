"""App-wide settings stored as string key/value rows."""

from casehub.models import db


class Setting(db.Model):
    """Single configuration value (e.g. jiraBaseUrl)."""

    __tablename__ = "settings"

    key = db.Column(db.String(100), primary_key=True)
    value = db.Column(db.Text, nullable=False, default="")

    def __repr__(self):
        return f"<Setting {self.key}>"
