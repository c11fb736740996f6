#!/usr/bin/env python3
"""
Print a fresh secret key line for the project's .env file.
"""

import secrets
import string

KEY_CHARS = string.ascii_letters + string.digits + '!@#$%^&*(-_=+)'


def generate_secret_key(length=50):
    return ''.join(secrets.choice(KEY_CHARS) for _ in range(length))


if __name__ == '__main__':
    print(f"DJANGO_SECRET_KEY={generate_secret_key()}")
