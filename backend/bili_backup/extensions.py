"""
Flask Extensions Initialization

This module initializes Flask extensions that are shared across the application.
The platform session manager lives here too so blueprints and services share
one credential/signer state per process.
"""
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

from .services.auth_service import SessionManager

# Database instance
db = SQLAlchemy()

# Flask-Migrate instance
migrate = Migrate()

# Platform session (credential + signer + transport)
session_manager = SessionManager()
