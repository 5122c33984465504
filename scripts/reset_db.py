# scripts/reset_db.py
from __future__ import annotations

from sqlalchemy import text

from app.core.settings import config
from app.db.session import engine

# Drops the whole public schema. Local development only.
if config.is_production:
    raise SystemExit("[ERR] refusing to reset a production database")

with engine.begin() as conn:
    conn.execute(text("DROP SCHEMA public CASCADE;"))
    conn.execute(text("CREATE SCHEMA public;"))
print("[OK] public schema dropped & recreated; run scripts.setup_db next")
