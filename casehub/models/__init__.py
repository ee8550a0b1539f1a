"""
CaseHub — Test Case & Test Run Management
Shared Flask-SQLAlchemy handle.

All model modules import ``db`` from here:
    from casehub.models import db
"""

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
