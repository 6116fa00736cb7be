"""Tests for chart repository management."""

from unittest.mock import MagicMock

import pytest
import requests
import yaml
from conftest import write_sources

from helm_version_manager.core.repo_manager import RepoManager
from helm_version_manager.core.repo_resolver import ChartIndex, index_path_for
from helm_version_manager.errors import ConflictError, NotFoundError, UpstreamError, ValidationError

INDEX = yaml.safe_dump({"apiVersion": "v1", "entries": {"nginx": [{"version": "15.0.0", "urls": ["nginx-15.0.0.tgz"]}]}})


def _session(text=INDEX, status=200):
    response = MagicMock()
    response.text = text
    if status >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status}")
    session = MagicMock()
    session.get.return_value = response
    return session


class TestRepoManager:
    def test_list_without_file(self, settings):
        assert RepoManager(settings=settings, session=MagicMock()).list_repositories() == []

    def test_add_downloads_index_then_writes_entry(self, settings):
        session = _session()
        manager = RepoManager(settings=settings, session=session)

        repo = manager.add_repository("bitnami", "https://charts.bitnami.com/bitnami/")

        session.get.assert_called_once_with("https://charts.bitnami.com/bitnami/index.yaml", timeout=30)
        assert repo.name == "bitnami"
        assert index_path_for(settings, "bitnami").read_text() == INDEX
        assert [r.name for r in manager.list_repositories()] == ["bitnami"]

    def test_add_existing_name_conflicts(self, settings):
        write_sources(settings, {"bitnami": ("https://charts.bitnami.com/bitnami", None)})
        session = _session()
        with pytest.raises(ConflictError, match="repository bitnami already exists"):
            RepoManager(settings=settings, session=session).add_repository("bitnami", "https://other.example.com")
        session.get.assert_not_called()

    @pytest.mark.parametrize("name,url", [("", "https://x"), ("x", ""), ("x", "ftp://x")])
    def test_add_validates_input(self, settings, name, url):
        with pytest.raises(ValidationError):
            RepoManager(settings=settings, session=MagicMock()).add_repository(name, url)

    def test_add_with_unreachable_index_writes_nothing(self, settings):
        manager = RepoManager(settings=settings, session=_session(status=404))
        with pytest.raises(UpstreamError):
            manager.add_repository("bitnami", "https://charts.bitnami.com/bitnami")
        assert manager.list_repositories() == []

    def test_add_rejects_non_index_document(self, settings):
        manager = RepoManager(settings=settings, session=_session(text="<html>hello</html>"))
        with pytest.raises(UpstreamError):
            manager.add_repository("bitnami", "https://charts.bitnami.com/bitnami")

    def test_remove_deletes_entry_and_index(self, settings):
        write_sources(settings, {
            "bitnami": ("https://charts.bitnami.com/bitnami", {"nginx": []}),
            "mirror": ("https://mirror.example.com", None),
        })
        manager = RepoManager(settings=settings, session=MagicMock())

        manager.remove_repository("bitnami")

        assert [r.name for r in manager.list_repositories()] == ["mirror"]
        assert not index_path_for(settings, "bitnami").exists()

    def test_remove_keeps_other_entry_fields(self, settings):
        settings.helm_config_dir.mkdir(parents=True)
        settings.repositories_file.write_text(yaml.safe_dump({
            "apiVersion": "",
            "repositories": [
                {"name": "private", "url": "https://charts.example.com", "username": "bot"},
                {"name": "bitnami", "url": "https://charts.bitnami.com/bitnami"},
            ],
        }))
        RepoManager(settings=settings, session=MagicMock()).remove_repository("bitnami")

        saved = yaml.safe_load(settings.repositories_file.read_text())
        assert saved["repositories"] == [{"name": "private", "url": "https://charts.example.com", "username": "bot"}]

    def test_remove_unknown(self, settings):
        with pytest.raises(NotFoundError):
            RepoManager(settings=settings, session=MagicMock()).remove_repository("nope")

    def test_update_refreshes_index_and_clears_cache(self, settings):
        write_sources(settings, {"bitnami": ("https://charts.bitnami.com/bitnami", {"nginx": []})})
        index = ChartIndex(settings=settings)
        assert index.versions("nginx") == []

        RepoManager(settings=settings, index=index, session=_session()).update_repository("bitnami")

        assert [c.version for c in index.versions("nginx")] == ["15.0.0"]

    def test_update_unknown(self, settings):
        with pytest.raises(NotFoundError):
            RepoManager(settings=settings, session=MagicMock()).update_repository("nope")
