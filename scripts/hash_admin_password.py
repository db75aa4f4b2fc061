"""Print a password hash suitable for ADMIN_PASSWORD_HASH / SUPER_ADMIN_PASSWORD_HASH.

Usage: python scripts/hash_admin_password.py [--env-var NAME]

Reads the password from the terminal (never from argv, so it stays out of shell history).
"""
from __future__ import annotations

import argparse
import getpass
import sys

from werkzeug.security import generate_password_hash


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--env-var", default="ADMIN_PASSWORD_HASH", help="variable name to print in the .env line")
    args = parser.parse_args(argv)
    password = getpass.getpass("Password: ")
    if not password:
        sys.stderr.write("[ERROR] empty password\n")
        return 1
    if getpass.getpass("Repeat: ") != password:
        sys.stderr.write("[ERROR] passwords do not match\n")
        return 1
    print(f"{args.env_var}={generate_password_hash(password)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
