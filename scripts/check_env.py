#!/usr/bin/env python3
"""Basic environment sanity checks for RetroVault."""

from __future__ import annotations

import os
import sys
from pathlib import Path


ENV_FILENAMES = (".env.local", ".env")
SECRET_PLACEHOLDER = "change-me"
MIN_SECRET_LENGTH = 32


def parse_env(content: str) -> dict[str, str]:
    """Parse a dotenv-style string into a dictionary."""
    data: dict[str, str] = {}
    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip("'").strip('"')
        data[key] = value
    return data


def load_env() -> dict[str, str]:
    """Merge OS environment variables with values from .env files."""
    env: dict[str, str] = dict(os.environ)
    repo_root = Path(__file__).resolve().parent.parent
    for filename in ENV_FILENAMES:
        path = repo_root / filename
        if not path.exists():
            continue
        env.update(parse_env(path.read_text(encoding="utf8")))
    return env


def collect_issues(env: dict[str, str]) -> tuple[list[str], list[str]]:
    """Return ``(issues, warnings)`` for the given environment."""
    issues: list[str] = []
    warnings: list[str] = []

    mongo_uri = env.get("MONGO_URI", "")
    if not mongo_uri:
        issues.append("MONGO_URI is missing.")
    elif ":27017" in mongo_uri:
        issues.append(
            "MONGO_URI still targets the default MongoDB port 27017. "
            "Use the repo default 47017 to avoid conflicts."
        )

    secret = env.get("SESSION_SECRET", "")
    if not secret or secret == SECRET_PLACEHOLDER:
        issues.append("SESSION_SECRET is missing or still set to the placeholder.")
    elif len(secret) < MIN_SECRET_LENGTH:
        warnings.append(f"SESSION_SECRET is shorter than {MIN_SECRET_LENGTH} characters.")

    if not env.get("RAWG_API_KEY", "").strip():
        warnings.append("RAWG_API_KEY is not set; catalog search will only serve cached results.")

    rounds = env.get("BCRYPT_ROUNDS", "").strip()
    if rounds and (not rounds.isdigit() or not 4 <= int(rounds) <= 31):
        issues.append("BCRYPT_ROUNDS must be an integer between 4 and 31.")

    return issues, warnings


def main() -> int:
    issues, warnings = collect_issues(load_env())

    for entry in warnings:
        print(f"[check-env] Warning: {entry}")

    if issues:
        print("[check-env] Issues detected:")
        for entry in issues:
            print(f"  - {entry}")
        return 1

    print("[check-env] Environment variables look good.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
