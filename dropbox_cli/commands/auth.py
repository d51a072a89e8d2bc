"""Authentication and account commands."""

from __future__ import annotations

from ..core import get_client, print_account_summary, print_json, save_config


def cmd_auth_set(args):
    save_config(
        access_token=args.token,
        refresh_token=args.refresh_token,
        app_key=args.app_key,
        app_secret=args.app_secret,
    )


def cmd_account(args):
    client = get_client(args.verbose)
    result = client.get_current_account()
    if args.summary:
        print_account_summary(result)
    else:
        print_json(result)
