"""Create the founder account.

Usage: python scripts/seed_db.py [email] [password] [name]
Falls back to FOUNDER_EMAIL / FOUNDER_PASSWORD / FOUNDER_NAME from the settings.
"""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.company_management.company_management.database.bootstrap import ensure_founder


def main(argv: list[str]) -> int:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    email = argv[0] if len(argv) > 0 else getattr(settings, "FOUNDER_EMAIL", "")
    password = argv[1] if len(argv) > 1 else getattr(settings, "FOUNDER_PASSWORD", "")
    name = argv[2] if len(argv) > 2 else getattr(settings, "FOUNDER_NAME", "Founder")
    if not email or not password:
        print("founder email and password are required (args or FOUNDER_EMAIL/FOUNDER_PASSWORD)")
        return 2

    created = ensure_founder(db_config, name=name, email=email, password=password)
    print(f"OK: founder {email} {'created' if created else 'already exists'}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
