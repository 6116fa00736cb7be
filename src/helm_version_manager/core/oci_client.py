"""Minimal OCI distribution API client for Helm charts.

Covers what chart upgrades need: listing a repository's tags and pulling the
chart layer of a tagged manifest. Anonymous and credentialed bearer-token
flows are supported, as are registries that answer with a Basic challenge.
Credentials come from helm's registry config (docker ``config.json`` format).
"""

from __future__ import annotations

import base64
import hashlib
import json
import logging
import re
from urllib.parse import urljoin

import requests

from helm_version_manager.config.settings import Settings, settings as default_settings
from helm_version_manager.errors import NotFoundError, UpstreamError
from helm_version_manager.models import OCI_SCHEME

logger = logging.getLogger(__name__)

HELM_CHART_LAYER = "application/vnd.cncf.helm.chart.content.v1.tar+gzip"
LEGACY_CHART_LAYER = "application/tar+gzip"
MANIFEST_ACCEPT = ", ".join([
    "application/vnd.oci.image.manifest.v1+json",
    "application/vnd.docker.distribution.manifest.v2+json",
])

_CHALLENGE_PARAM = re.compile(r'(\w+)="([^"]*)"')


def split_reference(reference: str) -> tuple[str, str]:
    """Split ``[oci://]host[:port]/path`` into (host, repository path)."""
    ref = reference.strip()
    if ref.lower().startswith(OCI_SCHEME):
        ref = ref[len(OCI_SCHEME):]
    ref = ref.strip("/")
    host, _, path = ref.partition("/")
    if not host or not path:
        raise NotFoundError(f"invalid OCI reference {reference!r}: expected host/repository")
    return host, path


def parse_challenge(header: str) -> tuple[str, dict[str, str]]:
    scheme, _, params = header.strip().partition(" ")
    return scheme.lower(), dict(_CHALLENGE_PARAM.findall(params))


class OciClient:
    """Talks to OCI registries over HTTPS."""

    def __init__(self, settings: Settings | None = None, session: requests.Session | None = None):
        self.settings = settings or default_settings
        self.session = session or requests.Session()
        self._tokens: dict[tuple[str, str], str] = {}
        self._auths: dict[str, dict] | None = None

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    def list_tags(self, reference: str) -> list[str]:
        """Return every tag of ``reference`` in the order the registry lists them."""
        host, path = split_reference(reference)
        url = f"https://{host}/v2/{path}/tags/list"
        tags: list[str] = []
        while url:
            response = self._get(host, path, url)
            body = _json(response, reference)
            tags.extend(body.get("tags") or [])
            next_link = response.links.get("next", {}).get("url")
            url = urljoin(response.url, next_link) if next_link else ""
        logger.debug("Registry %s lists %d tags", reference, len(tags))
        return tags

    def fetch_chart(self, reference: str, tag: str) -> bytes:
        """Download the packaged chart stored under ``reference:tag``."""
        host, path = split_reference(reference)
        manifest_url = f"https://{host}/v2/{path}/manifests/{tag}"
        manifest = _json(
            self._get(host, path, manifest_url, headers={"Accept": MANIFEST_ACCEPT}),
            f"{reference}:{tag}",
        )
        layer = _chart_layer(manifest)
        if layer is None:
            raise UpstreamError(f"manifest {reference}:{tag} has no helm chart layer")
        digest = layer.get("digest", "")
        blob = self._get(host, path, f"https://{host}/v2/{path}/blobs/{digest}").content
        _verify_digest(blob, digest, f"{reference}:{tag}")
        return blob

    # ------------------------------------------------------------------
    # HTTP + auth
    # ------------------------------------------------------------------

    def _get(self, host: str, path: str, url: str, headers: dict[str, str] | None = None) -> requests.Response:
        scope = f"repository:{path}:pull"
        request_headers = dict(headers or {})
        token = self._tokens.get((host, scope))
        if token:
            request_headers["Authorization"] = f"Bearer {token}"
        response = self._request(url, request_headers)

        if response.status_code == 401:
            challenge = response.headers.get("WWW-Authenticate", "")
            scheme, params = parse_challenge(challenge)
            if scheme == "bearer":
                token = self._fetch_token(host, scope, params)
                self._tokens[(host, scope)] = token
                request_headers["Authorization"] = f"Bearer {token}"
                response = self._request(url, request_headers)
            elif scheme == "basic":
                credentials = self._credentials(host)
                if credentials is None:
                    raise UpstreamError(f"registry {host} requires credentials, none configured")
                response = self._request(url, request_headers, auth=credentials)

        if response.status_code == 404:
            raise NotFoundError(f"{url} not found in registry {host}")
        if response.status_code in (401, 403):
            raise UpstreamError(f"registry {host} denied access to {path} ({response.status_code})")
        if not response.ok:
            raise UpstreamError(f"registry {host} returned {response.status_code} for {url}")
        return response

    def _request(
        self, url: str, headers: dict[str, str], auth: tuple[str, str] | None = None,
    ) -> requests.Response:
        try:
            return self.session.get(url, headers=headers, auth=auth, timeout=self.settings.request_timeout)
        except requests.RequestException as e:
            raise UpstreamError(f"request to {url} failed: {e}") from e

    def _fetch_token(self, host: str, scope: str, params: dict[str, str]) -> str:
        realm = params.get("realm")
        if not realm:
            raise UpstreamError(f"registry {host} sent a bearer challenge without a realm")
        query = {"scope": params.get("scope") or scope}
        if params.get("service"):
            query["service"] = params["service"]
        try:
            response = self.session.get(
                realm,
                params=query,
                auth=self._credentials(host),
                timeout=self.settings.request_timeout,
            )
        except requests.RequestException as e:
            raise UpstreamError(f"token request to {realm} failed: {e}") from e
        if not response.ok:
            raise UpstreamError(f"token request to {realm} returned {response.status_code}")
        body = _json(response, realm)
        token = body.get("token") or body.get("access_token")
        if not token:
            raise UpstreamError(f"token response from {realm} carried no token")
        return token

    def _credentials(self, host: str) -> tuple[str, str] | None:
        if self._auths is None:
            self._auths = _load_auths(self.settings)
        entry = self._auths.get(host) or self._auths.get(f"https://{host}")
        if not entry:
            return None
        if entry.get("auth"):
            try:
                user, _, password = base64.b64decode(entry["auth"]).decode("utf-8").partition(":")
            except ValueError:
                logger.debug("Unreadable auth entry for %s", host, exc_info=True)
                return None
            return user, password
        if entry.get("username"):
            return entry["username"], entry.get("password", "")
        return None


def _load_auths(settings: Settings) -> dict[str, dict]:
    path = settings.registry_config_file
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        logger.debug("Failed to read registry config %s", path, exc_info=True)
        return {}
    return data.get("auths") or {}


def _json(response: requests.Response, what: str) -> dict:
    try:
        body = response.json()
    except ValueError as e:
        raise UpstreamError(f"invalid JSON from registry for {what}") from e
    if not isinstance(body, dict):
        raise UpstreamError(f"unexpected registry response for {what}")
    return body


def _chart_layer(manifest: dict) -> dict | None:
    layers = manifest.get("layers") or []
    for media_type in (HELM_CHART_LAYER, LEGACY_CHART_LAYER):
        for layer in layers:
            if layer.get("mediaType") == media_type:
                return layer
    return None


def _verify_digest(blob: bytes, digest: str, what: str) -> None:
    algorithm, _, expected = digest.partition(":")
    if algorithm != "sha256":
        return
    actual = hashlib.sha256(blob).hexdigest()
    if actual != expected:
        raise UpstreamError(f"digest mismatch for {what}: expected {expected}, got {actual}")
