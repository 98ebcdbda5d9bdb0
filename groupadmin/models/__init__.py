"""
Host Group Admin — SQLAlchemy models package.

Usage:
    from groupadmin.models import db
"""

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
