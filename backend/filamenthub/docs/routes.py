"""Docs blueprint: /openapi.json, /docs (Swagger UI), /redoc."""
from __future__ import annotations

from flask import Blueprint, Response, jsonify

from .openapi import build_openapi

bp = Blueprint("docs", __name__)

TITLE = "Filament Profile Hub API"

SWAGGER_BODY = """
  <link rel="stylesheet" href="https://unpkg.com/swagger-ui-dist@5/swagger-ui.css" />
  <div id="swagger-ui"></div>
  <script src="https://unpkg.com/swagger-ui-dist@5/swagger-ui-bundle.js"></script>
  <script>window.ui = SwaggerUIBundle({ url: '/openapi.json', dom_id: '#swagger-ui' });</script>
"""

REDOC_BODY = """
  <redoc spec-url="/openapi.json"></redoc>
  <script src="https://cdn.jsdelivr.net/npm/redoc@next/bundles/redoc.standalone.js"></script>
"""


def _page(title: str, body: str) -> Response:
    html = (
        "<!doctype html><html><head><meta charset=\"utf-8\"/>"
        f"<title>{title}</title><style>body{{margin:0;}}</style></head>"
        f"<body>{body}</body></html>"
    )
    return Response(html, mimetype="text/html")


@bp.get("/openapi.json")
def openapi_json() -> Response:
    return jsonify(build_openapi())


@bp.get("/docs")
def swagger_ui() -> Response:
    return _page(TITLE, SWAGGER_BODY)


@bp.get("/redoc")
def redoc() -> Response:
    return _page(f"{TITLE} - ReDoc", REDOC_BODY)
