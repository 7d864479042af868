"""Mint a bearer token for the Pro Directory API.

Examples:
    python create_token.py --admin
    python create_token.py --account 42 --days 30
"""
import argparse

from pro_directory_api.app.core.security import create_account_token, create_admin_token


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--admin", action="store_true", help="administrator token")
    group.add_argument("--account", type=int, metavar="ID", help="token for one professional account")
    parser.add_argument("--subject", default="admin", help="subject recorded in audit logs for admin tokens")
    parser.add_argument("--days", type=int, default=365, help="validity in days")
    args = parser.parse_args()

    expires = args.days * 24 * 60 * 60
    if args.admin:
        token = create_admin_token(args.subject, expires_delta=expires)
    else:
        token = create_account_token(args.account, expires_delta=expires)
    print(token)


if __name__ == "__main__":
    main()
