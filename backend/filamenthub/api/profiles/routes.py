"""Profiles blueprint: browse, upload, edit, delete, vote, download."""
from __future__ import annotations

import io

from flask import Blueprint, request, send_file
from sqlalchemy.orm import Session

from ...auth.jwt import current_user_id, optional_bearer, require_bearer
from ...db.session import db
from ...domain.profile import FilterSelection, Profile
from ...errors import ok
from ...services.download_service import DownloadService
from ...services.file_service import FileService
from ...services.profile_service import ProfileService
from ...services.vote_service import VoteService
from .schemas import ConfigUploadIn, FacetsOut, ProfileUpdateIn, ProfileUploadIn, VoteIn, dump_profile


bp = Blueprint("profiles", __name__)

FILTER_ARGS = ("producer", "material", "printer", "search", "sort")


def _session() -> Session:
    assert db.Session is not None, "DB session is not initialized"
    return db.Session()


def _service() -> ProfileService:
    return ProfileService(_session())


def _dump(profile: Profile) -> dict:
    return dump_profile(FileService.with_urls(profile))


@bp.get("/")
def list_profiles():
    svc = _service()
    selection = None
    if any(request.args.get(k) for k in FILTER_ARGS):
        selection = FilterSelection.from_params(request.args)
    return ok([_dump(p) for p in svc.list_profiles(selection)])


@bp.get("/facets")
def facets():
    return ok(FacetsOut.model_validate(_service().facets()).model_dump())


@bp.get("/materials/options")
def material_options():
    return ok(_service().material_options())


@bp.get("/mine")
@require_bearer
def my_profiles():
    svc = _service()
    return ok([_dump(p) for p in svc.list_user_profiles(current_user_id())])


@bp.get("/<profile_id>")
def get_profile(profile_id: str):
    return ok(_dump(_service().get_profile(profile_id)))


@bp.post("/")
@require_bearer
def upload_profile():
    payload = ProfileUploadIn.model_validate(request.form.to_dict())
    svc = _service()
    created = svc.upload_profile(
        user_id=current_user_id(),
        name=payload.name,
        producer=payload.producer,
        material=payload.material,
        description=payload.description,
        printers=payload.printers,
        file=request.files.get("file"),
    )
    return ok(_dump(created), 201)


@bp.put("/<profile_id>")
@require_bearer
def update_profile(profile_id: str):
    payload = ProfileUpdateIn.model_validate_json(request.data)
    fields = {k: v for k, v in payload.model_dump().items() if v is not None}
    updated = _service().update_profile(profile_id, current_user_id(), **fields)
    return ok(_dump(updated))


@bp.post("/<profile_id>/config")
@require_bearer
def attach_config(profile_id: str):
    payload = ConfigUploadIn.model_validate(request.form.to_dict())
    updated = _service().attach_config(
        profile_id,
        current_user_id(),
        printers=payload.printers,
        file=request.files.get("file"),
    )
    return ok(_dump(updated))


@bp.delete("/<profile_id>")
@require_bearer
def delete_profile(profile_id: str):
    deleted = _service().delete_profile(profile_id, current_user_id())
    return ok({"deleted": deleted})


@bp.put("/<profile_id>/vote")
@require_bearer
def persist_vote(profile_id: str):
    payload = VoteIn.model_validate_json(request.data)
    updated = VoteService(_session()).persist_vote(profile_id, current_user_id(), payload.direction)
    return ok(_dump(updated))


@bp.delete("/<profile_id>/vote")
@require_bearer
def retract_vote(profile_id: str):
    updated = VoteService(_session()).retract_vote(profile_id, current_user_id())
    return ok(_dump(updated))


@bp.post("/<profile_id>/downloads")
@optional_bearer
def record_download(profile_id: str):
    count = DownloadService(_session()).record_download(profile_id, current_user_id())
    return ok({"downloadCount": count})


@bp.get("/<profile_id>/download")
@optional_bearer
def download_file(profile_id: str):
    content, file_name = DownloadService(_session()).fetch_file(profile_id, current_user_id())
    return send_file(
        io.BytesIO(content),
        mimetype="application/octet-stream",
        as_attachment=True,
        download_name=file_name,
    )
