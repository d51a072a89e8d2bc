import io
import json
import posixpath
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))
from dropbox_cli.core.client import DropboxClient
from dropbox_cli.core.http import Response


def _error(summary, error, status=409):
    return status, {"error_summary": summary, "error": error}


class FakeDropbox:
    """In-memory stand-in for the Dropbox API, used in place of a Transport.

    ``locked_folders`` reject Paper creation with ``invalid_file_extension``.
    ``hidden_links`` holds links that exist but are not returned by the
    listing call, which simulates a concurrent link creation.
    """

    def __init__(self):
        self.calls = []
        self.files = {}
        self.revisions = {}
        self.links = {}
        self.hidden_links = {}
        self.locked_folders = set()

    def add_file(self, path, content=b""):
        if isinstance(content, str):
            content = content.encode("utf-8")
        self.files[path] = content

    def metadata(self, path):
        name = posixpath.basename(path)
        return {
            ".tag": "file",
            "name": name,
            "path_display": path,
            "path_lower": path.lower(),
            "id": f"id:{name}",
            "size": len(self.files[path]),
            "client_modified": "2024-03-01T10:00:00Z",
        }

    def endpoints(self):
        return [c["endpoint"] for c in self.calls]

    def send(self, url, *, method="POST", headers=None, body=None, timeout=30, stream=False):
        headers = dict(headers or {})
        endpoint = "/" + url.split("/2/", 1)[1]
        arg = json.loads(headers["Dropbox-API-Arg"]) if "Dropbox-API-Arg" in headers else None
        payload = json.loads(body) if headers.get("Content-Type") == "application/json" else None
        self.calls.append({
            "url": url,
            "endpoint": endpoint,
            "headers": headers,
            "body": body,
            "arg": arg,
            "json": payload,
            "timeout": timeout,
        })
        handler = getattr(self, "_" + endpoint.strip("/").replace("/", "_"))
        status, data, resp_headers = _normalize(handler(payload=payload, arg=arg, body=body))
        raw = data if isinstance(data, bytes) else json.dumps(data).encode("utf-8")
        return Response(status, resp_headers, io.BytesIO(raw))

    # --- endpoints ------------------------------------------------------

    def _users_get_current_account(self, **_):
        return 200, {
            "account_id": "dbid:1",
            "name": {"display_name": "Ada Lovelace"},
            "email": "ada@example.com",
            "country": "GB",
        }

    def _files_list_folder(self, payload, **_):
        prefix = payload["path"].rstrip("/") + "/"
        entries = [self.metadata(p) for p in sorted(self.files) if p.startswith(prefix)]
        return 200, {"entries": entries, "cursor": "cur-1", "has_more": False}

    def _files_list_folder_continue(self, **_):
        return 200, {"entries": [], "cursor": "cur-2", "has_more": False}

    def _files_search_v2(self, payload, **_):
        query = payload["query"].lower()
        options = payload["options"]
        exts = options.get("file_extensions")
        matches = []
        for path in sorted(self.files):
            if options.get("path") and not path.startswith(options["path"]):
                continue
            if exts and posixpath.splitext(path)[1].lstrip(".") not in exts:
                continue
            if query in path.lower():
                matches.append({"metadata": {".tag": "metadata", "metadata": self.metadata(path)}})
        return 200, {"matches": matches[: options["max_results"]], "has_more": False}

    def _files_get_metadata(self, payload, **_):
        if payload["path"] not in self.files:
            return _error("path/not_found/..", {".tag": "path", "path": {".tag": "not_found"}})
        return 200, self.metadata(payload["path"])

    def _files_download(self, arg, **_):
        path = arg["path"]
        if path not in self.files:
            return _error("path/not_found/", {".tag": "path", "path": {".tag": "not_found"}})
        return 200, self.files[path], {"Dropbox-API-Result": json.dumps(self.metadata(path))}

    def _files_export(self, arg, **_):
        path = arg["path"]
        if path not in self.files:
            return _error("path/not_found/", {".tag": "path", "path": {".tag": "not_found"}})
        return 200, self.files[path]

    def _files_paper_create(self, arg, body, **_):
        path = arg["path"]
        if posixpath.dirname(path) in self.locked_folders:
            return _error("invalid_file_extension/..", {".tag": "invalid_file_extension"})
        if path in self.files:
            return _error("invalid_path/..", {".tag": "invalid_path"})
        self.files[path] = body
        self.revisions[path] = 1
        return 200, {
            "url": f"https://www.dropbox.com/scl/fi/{posixpath.basename(path)}",
            "result_path": path,
            "file_id": f"id:{posixpath.basename(path)}",
            "paper_revision": 1,
        }

    def _files_paper_update(self, arg, body, **_):
        path = arg["path"]
        if path not in self.files:
            return _error("path/not_found/..", {".tag": "path", "path": {".tag": "not_found"}})
        policy = arg["doc_update_policy"]
        if policy != "overwrite" and arg.get("paper_revision") != self.revisions[path]:
            return _error("revision_mismatch/..", {".tag": "revision_mismatch"})
        if policy == "update":
            self.files[path] = self.files[path] + body
        elif policy == "prepend":
            self.files[path] = body + self.files[path]
        else:
            self.files[path] = body
        self.revisions[path] += 1
        return 200, {"paper_revision": self.revisions[path]}

    def _files_move_v2(self, payload, **_):
        src, dst = payload["from_path"], payload["to_path"]
        if src not in self.files:
            return _error("from_lookup/not_found/..", {".tag": "from_lookup"})
        self.files[dst] = self.files.pop(src)
        if src in self.revisions:
            self.revisions[dst] = self.revisions.pop(src)
        return 200, {"metadata": self.metadata(dst)}

    def _sharing_list_shared_links(self, payload, **_):
        link = self.links.get(payload["path"])
        return 200, {"links": [link] if link else [], "has_more": False}

    def _sharing_create_shared_link_with_settings(self, payload, **_):
        path = payload["path"]
        existing = self.links.get(path) or self.hidden_links.get(path)
        if existing:
            return _error(
                "shared_link_already_exists/metadata/..",
                {
                    ".tag": "shared_link_already_exists",
                    "shared_link_already_exists": {".tag": "metadata", "metadata": existing},
                },
            )
        link = {
            ".tag": "file",
            "url": f"https://www.dropbox.com/s/abc/{posixpath.basename(path)}?dl=0",
            "path_lower": path.lower(),
            "link_permissions": {"resolved_visibility": {".tag": "public"}},
        }
        self.links[path] = link
        return 200, link


def _normalize(result):
    if len(result) == 2:
        status, data = result
        return status, data, {}
    return result


@pytest.fixture
def fake():
    return FakeDropbox()


@pytest.fixture
def client(fake):
    return DropboxClient(fake)


class ScriptedTransport:
    """Transport returning queued ``(status, body)`` responses in order."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def send(self, url, *, method="POST", headers=None, body=None, timeout=30, stream=False):
        self.calls.append({"url": url, "method": method, "headers": dict(headers or {}), "body": body, "timeout": timeout})
        status, raw = self.responses.pop(0)
        if isinstance(raw, (dict, list)):
            raw = json.dumps(raw)
        if isinstance(raw, str):
            raw = raw.encode("utf-8")
        return Response(status, {}, io.BytesIO(raw))


@pytest.fixture
def scripted():
    return ScriptedTransport
