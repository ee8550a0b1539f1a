"""Shared helpers used by services and blueprints.

get_or_404:          tuple-return lookup for blueprints
require_entity:      raising lookup for services
parse_entity_id:     accepts 5, "5" or prefixed keys such as "TC-5"
clean_name:          trims and length-checks entity names
json_body:           the JSON object of the current request
db_commit_or_error:  commit or return a ready-to-send error response
"""
import logging

from flask import current_app, jsonify, request

from casehub.core.exceptions import NotFoundError, ValidationError
from casehub.models import db

logger = logging.getLogger(__name__)


def get_or_404(model, pk, label=None):
    """Fetch a model instance by primary key or return a 404 error tuple.

    - Success: (obj, None)
    - Failure: (None, (jsonify_response, 404))

        obj, err = get_or_404(Project, pid)
        if err:
            return err
    """
    label = label or model.__name__
    obj = db.session.get(model, pk)
    if not obj:
        return None, (jsonify({"error": f"{label} not found"}), 404)
    return obj, None


def require_entity(model, pk, label):
    """Fetch a model instance by primary key or raise NotFoundError."""
    obj = db.session.get(model, pk) if pk is not None else None
    if obj is None:
        raise NotFoundError(resource=label, resource_id=pk)
    return obj


def parse_entity_id(value, prefix=None, field="id"):
    """Parse an integer id, optionally carrying a display prefix.

    parse_entity_id("TC-5", "TC") -> 5
    parse_entity_id(5)            -> 5

    Raises ValidationError for anything that is not a positive integer.
    """
    if isinstance(value, bool):
        raise ValidationError(f"Invalid {field}")
    if isinstance(value, int):
        number = value
    elif isinstance(value, str):
        text = value.strip()
        if prefix and text.upper().startswith(f"{prefix}-"):
            text = text[len(prefix) + 1:]
        try:
            number = int(text)
        except ValueError:
            raise ValidationError(f"Invalid {field}") from None
    else:
        raise ValidationError(f"Invalid {field}")
    if number < 1:
        raise ValidationError(f"Invalid {field}")
    return number


def clean_name(value, field="Name"):
    """Return the trimmed name or raise ValidationError."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} is required")
    trimmed = value.strip()
    max_len = current_app.config.get("NAME_MAX_LENGTH", 50)
    if len(trimmed) > max_len:
        raise ValidationError(f"{field} must be at most {max_len} characters")
    return trimmed


def json_body():
    """Return the request JSON object, {} when there is no body.

    Raises ValidationError when the body is JSON but not an object.
    """
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


# ── Database commit helper ───────────────────────────────────────────────────

def db_commit_or_error():
    """Commit the current SQLAlchemy session, returning an error response on failure.

    Returns:
        None on success.
        (response, status_code) tuple on failure — ready for ``return``.

    Usage::

        err = db_commit_or_error()
        if err:
            return err

    IntegrityError → 409 (duplicate / constraint violation)
    OperationalError → 500 (connection / lock issues)
    Other → 500 (unexpected)
    """
    from sqlalchemy.exc import IntegrityError, OperationalError

    try:
        db.session.commit()
        return None
    except IntegrityError as exc:
        db.session.rollback()
        logger.warning("Integrity error on commit: %s", exc.orig)
        return jsonify({"error": "Duplicate or constraint violation"}), 409
    except OperationalError:
        db.session.rollback()
        logger.exception("Database operational error on commit")
        return jsonify({"error": "Database error"}), 500
    except Exception:
        db.session.rollback()
        logger.exception("Unexpected database error on commit")
        return jsonify({"error": "Database error"}), 500
