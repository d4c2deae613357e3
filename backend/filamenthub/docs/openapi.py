"""Builds a minimal OpenAPI spec from existing Pydantic schemas."""
from __future__ import annotations

from typing import Any, Dict

from flask import request

from ..api.profiles.schemas import ConfigUploadIn, FacetsOut, ProfileOut, ProfileUpdateIn, ProfileUploadIn, VoteIn

REF = "#/components/schemas/{model}"


def _schemas() -> Dict[str, Any]:
    return {
        model.__name__: model.model_json_schema(ref_template=REF, by_alias=True)
        for model in (ProfileOut, ProfileUploadIn, ProfileUpdateIn, ConfigUploadIn, VoteIn, FacetsOut)
    }


def _data(schema: Dict[str, Any]) -> Dict[str, Any]:
    return {"application/json": {"schema": {"type": "object", "properties": {"data": schema}}}}


def _ref(name: str) -> Dict[str, Any]:
    return {"$ref": REF.format(model=name)}


def _path_param(name: str) -> Dict[str, Any]:
    return {"name": name, "in": "path", "required": True, "schema": {"type": "string"}}


def _query(name: str, description: str) -> Dict[str, Any]:
    return {"name": name, "in": "query", "required": False, "schema": {"type": "string"}, "description": description}


BEARER = [{"BearerAuth": []}]


def build_openapi() -> Dict[str, Any]:
    base_url = f"{request.scheme}://{request.host}"
    security_schemes = {
        "BearerAuth": {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT"
        }
    }
    profile = {"description": "OK", "content": _data(_ref("ProfileOut"))}
    profile_list = {"description": "OK", "content": _data({"type": "array", "items": _ref("ProfileOut")})}
    return {
        "openapi": "3.0.3",
        "info": {"title": "Filament Profile Hub API", "version": "1.0.0"},
        "servers": [{"url": base_url}],
        "tags": [
            {"name": "Health"},
            {"name": "Profiles"},
            {"name": "Votes"},
            {"name": "Downloads"},
        ],
        "paths": {
            "/api/health/": {
                "get": {"tags": ["Health"], "summary": "Liveness check", "responses": {"200": {"description": "OK"}}}
            },
            "/api/health/supabase": {
                "get": {"tags": ["Health"], "summary": "Supabase client status", "responses": {"200": {"description": "Status"}}}
            },
            "/api/profiles/": {
                "get": {
                    "tags": ["Profiles"], "summary": "List profiles, newest first",
                    "parameters": [
                        _query("producer", "Exact producer, or 'all'"),
                        _query("material", "Exact material, or 'all'"),
                        _query("printer", "Printer model, or 'all'"),
                        _query("search", "Case-insensitive substring of name, producer or printers"),
                        _query("sort", "newest | votes | downloads"),
                    ],
                    "responses": {"200": profile_list},
                },
                "post": {
                    "tags": ["Profiles"], "summary": "Upload a profile (.json file)", "security": BEARER,
                    "requestBody": {"required": True, "content": {"multipart/form-data": {"schema": {
                        "allOf": [_ref("ProfileUploadIn")],
                        "properties": {"file": {"type": "string", "format": "binary"}},
                    }}}},
                    "responses": {"201": profile, "409": {"description": "Name already taken"},
                                  "422": {"description": "Invalid upload"}},
                },
            },
            "/api/profiles/facets": {
                "get": {"tags": ["Profiles"], "summary": "Producers, materials and printers for filters",
                        "responses": {"200": {"description": "OK", "content": _data(_ref("FacetsOut"))}}}
            },
            "/api/profiles/materials/options": {
                "get": {"tags": ["Profiles"], "summary": "Material dropdown options", "responses": {"200": {"description": "OK"}}}
            },
            "/api/profiles/mine": {
                "get": {"tags": ["Profiles"], "summary": "Profiles uploaded by the caller", "security": BEARER,
                        "responses": {"200": profile_list}}
            },
            "/api/profiles/{profile_id}": {
                "parameters": [_path_param("profile_id")],
                "get": {"tags": ["Profiles"], "summary": "Get profile by id", "responses": {"200": profile}},
                "put": {
                    "tags": ["Profiles"], "summary": "Update profile metadata (uploader only)", "security": BEARER,
                    "requestBody": {"required": True, "content": {"application/json": {"schema": _ref("ProfileUpdateIn")}}},
                    "responses": {"200": profile},
                },
                "delete": {"tags": ["Profiles"], "summary": "Delete profile (uploader only)", "security": BEARER,
                           "responses": {"200": {"description": "OK"}}},
            },
            "/api/profiles/{profile_id}/config": {
                "parameters": [_path_param("profile_id")],
                "post": {
                    "tags": ["Profiles"], "summary": "Attach a printer-specific config file (uploader only)",
                    "security": BEARER,
                    "requestBody": {"required": True, "content": {"multipart/form-data": {"schema": {
                        "allOf": [_ref("ConfigUploadIn")],
                        "properties": {"file": {"type": "string", "format": "binary"}},
                    }}}},
                    "responses": {"200": profile, "403": {"description": "Not the uploader"},
                                  "422": {"description": "Invalid upload"}},
                },
            },
            "/api/profiles/{profile_id}/vote": {
                "parameters": [_path_param("profile_id")],
                "put": {
                    "tags": ["Votes"], "summary": "Cast or change the caller's vote", "security": BEARER,
                    "requestBody": {"required": True, "content": {"application/json": {"schema": _ref("VoteIn")}}},
                    "responses": {"200": profile},
                },
                "delete": {"tags": ["Votes"], "summary": "Retract the caller's vote", "security": BEARER,
                           "responses": {"200": profile}},
            },
            "/api/profiles/{profile_id}/downloads": {
                "parameters": [_path_param("profile_id")],
                "post": {"tags": ["Downloads"], "summary": "Count a download", "responses": {"200": {"description": "OK"}}},
            },
            "/api/profiles/{profile_id}/download": {
                "parameters": [_path_param("profile_id")],
                "get": {"tags": ["Downloads"], "summary": "Count a download and return the file",
                        "responses": {"200": {"description": "File", "content": {"application/octet-stream": {}}}}},
            },
        },
        "components": {
            "schemas": _schemas(),
            "securitySchemes": security_schemes
        },
    }
