#!/usr/bin/env python3
"""
Generate the JWT_SECRET_KEY shared with the portal's authentication service.
Add the printed line to the .env file of both services.
"""

import secrets

if __name__ == "__main__":
    print("=" * 60)
    print("Portal Access – JWT Secret Generator")
    print("=" * 60)

    secret_key = secrets.token_hex(32)

    print(f"\nJWT_SECRET_KEY={secret_key}\n")
    print("Tokens signed with the previous key stop verifying once this is deployed.")
    print("=" * 60)
