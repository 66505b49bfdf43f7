#!/usr/bin/env python3
"""Hash the coordinator password for ADMIN_PASSWORD."""
import sys

from meetpoll.core.security import get_password_hash, verify_password

MIN_LENGTH = 8


def main(argv):
    if len(argv) != 2:
        print("Usage: python hash_password.py 'coordinator-password'")
        return 1

    password = argv[1]
    if len(password) < MIN_LENGTH:
        print(f"Error: password must be at least {MIN_LENGTH} characters long")
        return 1

    password_hash = get_password_hash(password)
    if not verify_password(password, password_hash):
        print("Error: generated hash did not verify")
        return 1

    print("Add this to your .env file:")
    print(f"ADMIN_PASSWORD={password_hash}")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
