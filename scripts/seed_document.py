# scripts/seed_document.py
# Usage: python -m scripts.seed_document content/sample_playbook.json
from __future__ import annotations

import argparse

from app.core.logging import configure_logging
from app.core.settings import settings
from app.db.session import SessionLocal
from app.seeds.document_loader import load_document_file


def run(paths: list[str]) -> None:
    db = SessionLocal()
    try:
        for path in paths:
            result = load_document_file(db, path)
            db.commit()
            state = "created" if result.document_created else "updated"
            print(
                f"[OK] {path}: document {result.document_id} {state}; "
                f"sections +{result.sections_created} ~{result.sections_updated} ={result.sections_unchanged}"
            )
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def main():
    p = argparse.ArgumentParser(description="Create/update documents and sections from JSON files")
    p.add_argument("paths", nargs="+", help="JSON files (e.g., content/sample_playbook.json)")
    args = p.parse_args()

    configure_logging(settings.LOG_LEVEL)
    run(args.paths)


if __name__ == "__main__":
    main()
