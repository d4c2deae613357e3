"""Serves blobs kept by the local storage backend."""
from __future__ import annotations

import io

from flask import Blueprint, send_file

from ...errors import NotFoundError
from ...storage.ext_storage import storage


bp = Blueprint("files", __name__)


@bp.get("/<path:key>")
def get_file(key: str):
    if not storage.exists(key):
        raise NotFoundError(f"File {key} not found")
    return send_file(
        io.BytesIO(storage.load(key)),
        mimetype="application/octet-stream",
        as_attachment=True,
        download_name=key.rsplit("/", 1)[-1],
    )
