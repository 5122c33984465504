# scripts/db_check.py
from sqlalchemy import text

from app.db.session import engine, tables_exist

with engine.connect() as conn:
    ver = conn.execute(text("select version()")).scalar_one()
    db = conn.execute(text("select current_database()")).scalar_one()
    vector = conn.execute(text("select extversion from pg_extension where extname = 'vector'")).scalar()
    print("OK DB:", ver)
    print("Current DB:", db)
    print("pgvector:", vector or "not installed")
print("documents table:", "present" if tables_exist(engine) else "missing")
