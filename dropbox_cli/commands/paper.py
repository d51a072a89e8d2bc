"""Paper document commands."""

from __future__ import annotations

from ..core import (
    InputError,
    create_document,
    get_client,
    pick_path,
    print_json,
    print_paper_docs_summary,
    print_search_summary,
    read_content,
    update_document,
)


def cmd_paper(args):
    client = get_client(args.verbose)
    result = client.list_paper_docs(args.path or "")
    if args.summary:
        print_paper_docs_summary(result)
    else:
        print_json(result)


def cmd_paper_search(args):
    if not args.query:
        raise InputError("Search query required. Usage: dropbox paper-search <query>")
    client = get_client(args.verbose)
    result = client.search_paper_docs(args.query, max_results=args.limit, path=args.path)
    if args.summary:
        print_search_summary(result, args.query)
    else:
        print_json(result)


def cmd_read(args):
    client = get_client(args.verbose)
    path = args.path
    if not path and args.pick:
        path = pick_path(client, paper=True)
    if not path:
        raise InputError("Paper doc path required. Usage: dropbox read <path>")
    print(client.export_paper_doc(path, args.format))


def cmd_paper_create(args):
    if not args.path:
        raise InputError("Paper doc path required. Usage: dropbox paper-create <path>")
    content = read_content(args.content, args.input)
    client = get_client(args.verbose)
    result = create_document(client, args.path, content, args.format)
    if args.summary:
        print(f"Created: {result.result_path}")
    else:
        print_json(result.to_dict())


def cmd_paper_update(args):
    if not args.path:
        raise InputError("Paper doc path required. Usage: dropbox paper-update <path>")
    content = read_content(args.content, args.input)
    client = get_client(args.verbose)
    result = update_document(client, args.path, content, args.format, args.policy, args.revision)
    if args.summary:
        print(f"Updated: {result.result_path}")
    else:
        print_json(result.to_dict())
