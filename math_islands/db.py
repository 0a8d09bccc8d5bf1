# math_islands/db.py
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy.dialects.postgresql import JSONB

db = SQLAlchemy()

# JSONB on Postgres, plain JSON on SQLite (tests / local dev)
JSONType = db.JSON().with_variant(JSONB(), "postgresql")
