"""Key/value settings. Only ``jiraBaseUrl`` is exposed over the API."""

from casehub.core.exceptions import ValidationError
from casehub.models import db
from casehub.models.setting import Setting

JIRA_BASE_URL = "jiraBaseUrl"


def get_setting_value(key, default=""):
    row = db.session.get(Setting, key)
    return row.value if row is not None else default


def set_setting_value(key, value):
    row = db.session.get(Setting, key)
    if row is None:
        row = Setting(key=key, value=value)
        db.session.add(row)
    else:
        row.value = value
    db.session.flush()
    return row


def get_settings():
    return {JIRA_BASE_URL: get_setting_value(JIRA_BASE_URL, "")}


def update_settings(data):
    base_url = data.get(JIRA_BASE_URL)
    if not isinstance(base_url, str):
        raise ValidationError("jiraBaseUrl must be a string")
    cleaned = base_url.strip()
    if cleaned.endswith("/"):
        cleaned = cleaned[:-1]
    set_setting_value(JIRA_BASE_URL, cleaned)
    return {JIRA_BASE_URL: cleaned}
