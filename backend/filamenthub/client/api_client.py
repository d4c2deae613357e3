"""HTTP client for the Profiles API.

Acts as the remote persistence collaborator of ``ProfileStore``: wholesale
reads plus vote/download writes. The signed-in user travels as the bearer token.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

import requests
from loguru import logger
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..api.profiles.schemas import ProfileOut
from ..domain.profile import Profile, VoteDirection


class ApiClientError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None, error: Optional[str] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error = error


def build_session(token: Optional[str] = None) -> requests.Session:
    s = requests.Session()
    retry = Retry(
        total=3, read=3, connect=3, backoff_factor=0.5,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=frozenset({"GET", "HEAD"}),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    s.mount("http://", adapter)
    s.mount("https://", adapter)
    s.headers.update({"User-Agent": "filamenthub-client/1.0"})
    if token:
        s.headers["Authorization"] = f"Bearer {token}"
    return s


def profile_from_wire(data: Dict[str, Any]) -> Profile:
    out = ProfileOut.model_validate(data)
    return Profile(
        id=out.id,
        name=out.name,
        producer=out.producer,
        material=out.material,
        description=out.description,
        file_url=out.file_url,
        file_name=out.file_name,
        file_size=out.file_size,
        uploaded_by=out.uploaded_by,
        printers=list(out.printers),
        config_file_name=out.config_file_name,
        config_file_url=out.config_file_url,
        config_printers=list(out.config_printers),
        uploaded_at=out.uploaded_at,
        created_at=out.created_at,
        updated_at=out.updated_at,
        download_count=out.download_count,
        upvotes=out.upvotes,
        downvotes=out.downvotes,
        voted_users=dict(out.voted_users),
    )


class ProfileApiClient:
    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 20,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session or build_session(token)
        if session is not None and token:
            self.session.headers["Authorization"] = f"Bearer {token}"
        self.timeout = timeout

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = f"{self.base_url}/api/profiles{path}"
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise ApiClientError(f"{method} {url} failed: {e}") from e
        if not resp.ok:
            try:
                body = resp.json()
            except ValueError:
                body = {}
            raise ApiClientError(
                body.get("message") or f"{method} {url} returned {resp.status_code}",
                status_code=resp.status_code,
                error=body.get("error"),
            )
        return resp.json().get("data")

    # --- reads ---
    def fetch_all_profiles(self) -> List[Profile]:
        return [profile_from_wire(p) for p in self._request("GET", "/")]

    def fetch_my_profiles(self) -> List[Profile]:
        return [profile_from_wire(p) for p in self._request("GET", "/mine")]

    def get_profile(self, profile_id: str) -> Profile:
        return profile_from_wire(self._request("GET", f"/{profile_id}"))

    def facets(self) -> Dict[str, List[str]]:
        return self._request("GET", "/facets")

    # --- fire-and-forget mutations ---
    def persist_vote(self, profile_id: str, direction: VoteDirection) -> None:
        self._request("PUT", f"/{profile_id}/vote", json={"direction": direction.value})

    def retract_vote(self, profile_id: str) -> None:
        self._request("DELETE", f"/{profile_id}/vote")

    def record_download(self, profile_id: str) -> None:
        self._request("POST", f"/{profile_id}/downloads")

    # --- uploads and edits ---
    def upload_profile(
        self,
        *,
        name: str,
        producer: str,
        material: str,
        file_name: str,
        content: bytes,
        description: str = "",
        printers: Sequence[str] = (),
    ) -> Profile:
        form = {
            "name": name,
            "producer": producer,
            "material": material,
            "description": description,
            "printers": ",".join(printers),
        }
        files = {"file": (file_name, content, "application/json")}
        created = profile_from_wire(self._request("POST", "/", data=form, files=files))
        logger.info("Uploaded profile {} ({})", created.name, created.id)
        return created

    def attach_config(
        self, profile_id: str, *, file_name: str, content: bytes, printers: Sequence[str]
    ) -> Profile:
        form = {"printers": ",".join(printers)}
        files = {"file": (file_name, content, "application/json")}
        return profile_from_wire(self._request("POST", f"/{profile_id}/config", data=form, files=files))

    def update_profile(self, profile_id: str, **fields: Any) -> Profile:
        return profile_from_wire(self._request("PUT", f"/{profile_id}", json=fields))

    def delete_profile(self, profile_id: str) -> bool:
        return bool(self._request("DELETE", f"/{profile_id}").get("deleted"))

    def download_content(self, profile_id: str) -> bytes:
        url = f"{self.base_url}/api/profiles/{profile_id}/download"
        try:
            resp = self.session.get(url, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise ApiClientError(f"GET {url} failed: {e}") from e
        return resp.content
