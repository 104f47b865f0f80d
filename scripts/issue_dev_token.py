#!/usr/bin/env python3
"""
Issue a signed development token for a portal actor.

Usage:
    python scripts/issue_dev_token.py operator --id 12 --operator-id 4
    python scripts/issue_dev_token.py partner --id 3 --partner-id 5
"""

import argparse

from portal_access.api.auth import generate_token
from portal_access.models import Actor, Role


def build_parser():
    parser = argparse.ArgumentParser(description="Issue a development access token.")
    parser.add_argument("role", choices=[r.value for r in Role])
    parser.add_argument("--id", type=int, required=True, help="user id")
    parser.add_argument("--partner-id", type=int)
    parser.add_argument("--operator-id", type=int)
    parser.add_argument("--client-id", type=int)
    return parser


if __name__ == "__main__":
    args = build_parser().parse_args()
    actor = Actor(
        id=args.id,
        role=args.role,
        partner_id=args.partner_id,
        operator_id=args.operator_id,
        client_id=args.client_id,
    )

    print("=" * 70)
    print(f"Development token for {actor.role} #{actor.id}")
    print("=" * 70)
    print(generate_token(actor))
    print()
    print("Use it as:  Authorization: Bearer <token>")
