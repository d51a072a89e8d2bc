"""File, folder, metadata and shared link commands."""

from __future__ import annotations

import sys

from ..core import (
    InputError,
    get_client,
    get_shared_link,
    pick_path,
    print_folder_summary,
    print_json,
    print_metadata_summary,
    print_search_summary,
    save_response,
)


def cmd_ls(args):
    client = get_client(args.verbose)
    if args.cursor:
        result = client.list_folder_continue(args.cursor)
    else:
        result = client.list_folder(args.path or "", recursive=args.recursive, limit=args.limit)
    if args.summary:
        print_folder_summary(result)
    else:
        print_json(result)


def _split_csv(value):
    if not value:
        return None
    return [v.strip().lstrip(".") for v in value.split(",") if v.strip()]


def cmd_search(args):
    if not args.query and not args.cursor:
        raise InputError("Search query required. Usage: dropbox search <query>")
    client = get_client(args.verbose)
    if args.cursor:
        result = client.search_continue(args.cursor)
    else:
        result = client.search(
            args.query,
            max_results=args.limit,
            path=args.path,
            file_extensions=_split_csv(args.ext),
            file_categories=_split_csv(args.category),
        )
    if args.summary:
        print_search_summary(result, args.query or "")
    else:
        print_json(result)


def cmd_info(args):
    if not args.path:
        raise InputError("File path required. Usage: dropbox info <path>")
    client = get_client(args.verbose)
    result = client.get_metadata(args.path)
    if args.summary:
        print_metadata_summary(result)
    else:
        print_json(result)


def cmd_link(args):
    if not args.path:
        raise InputError("File path required. Usage: dropbox link <path>")
    client = get_client(args.verbose)
    result = get_shared_link(client, args.path)
    if args.summary:
        print(f"Shared link: {result.get('url')}")
    else:
        print(result.get("url"))


def cmd_download(args):
    client = get_client(args.verbose)
    path = args.path
    if not path and args.pick:
        path = pick_path(client, paper=False)
    if not path:
        raise InputError("File path required. Usage: dropbox download <path>")

    if args.output:
        resp = client.download_file(path, stream=True)
        size = resp.api_result().get("size")
        written = save_response(resp, args.output, total=size)
        print(f"Saved to {args.output} ({written} bytes)")
        return

    resp = client.download_file(path)
    data = resp.content
    try:
        print(data.decode("utf-8"))
    except UnicodeDecodeError:
        sys.stdout.flush()
        sys.stdout.buffer.write(data)
        sys.stdout.buffer.flush()
