#!/usr/bin/env python3
"""Delete expired rows from the Session table.

Sessions expire lazily; nothing removes old rows on its own. Run this from
cron (or by hand) when the table needs trimming.
"""
from __future__ import annotations

from kcc.auth.store import SessionStore
from kcc.core.logging_config import configure_logging
from kcc.infra.db import Database


def main() -> None:
    configure_logging()
    db = Database()
    removed = SessionStore(db).purge_expired()
    print(f"OK -> {removed} expired sessions removed")


if __name__ == "__main__":
    main()
