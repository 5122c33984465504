# scripts/setup_db.py
# Usage:
#   python -m scripts.setup_db                    # full catalog
#   python -m scripts.setup_db --phase tables --phase indexes
#   python -m scripts.setup_db --check            # connectivity + table check only
from __future__ import annotations

import argparse
import sys

from app.core.logging import configure_logging
from app.core.settings import settings
from app.db.provisioning import PHASES, apply_schema
from app.db.session import check_connection, engine, tables_exist


def run(phases: list[str] | None = None, check_only: bool = False) -> int:
    print("[INFO] Setting up Doc X database")
    if not check_connection(engine):
        print("[ERR] Cannot reach the database; check DATABASE_URL")
        return 1

    if check_only:
        print(f"[OK] documents table present: {tables_exist(engine)}")
        return 0

    report = apply_schema(engine, phases)
    for name, reason in report.failed:
        print(f"[WARN] {name}: {reason}")
    print(f"[OK] {report.summary()}")

    if not tables_exist(engine):
        print("[ERR] documents table is missing after provisioning")
        return 1
    return 0 if report.ok else 2


def main():
    p = argparse.ArgumentParser(description="Provision the Doc X schema (idempotent)")
    p.add_argument("--phase", action="append", choices=PHASES, help="Limit to a phase (repeatable)")
    p.add_argument("--check", action="store_true", help="Only verify connectivity and tables")
    args = p.parse_args()

    configure_logging(settings.LOG_LEVEL)
    sys.exit(run(args.phase, check_only=args.check))


if __name__ == "__main__":
    main()
