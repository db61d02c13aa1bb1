"""Tests for the catalog service and the REST client.

Coverage:
* core/catalog_service.py — parsing, tolerant skipping, search filter,
  error wrapping.
* infra/api_client.py — URL resolution and mapping of requests
  failures to typed errors (``requests.get`` is mocked).
"""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock, patch

import pytest

from serika_cli.core.catalog_service import CatalogService, filter_videos
from serika_cli.exceptions import ApiUnavailableError, CatalogFormatError
from serika_cli.infra.api_client import (
    DEFAULT_API_URL,
    SerikaApiClient,
    resolve_api_url,
)

from conftest import make_video

requests = pytest.importorskip("requests")


def _raw(**overrides: Any) -> dict[str, Any]:
    entry: dict[str, Any] = {
        "_id": "abc123",
        "title": "Cats on Keyboards",
        "isLive": False,
        "videoUrl": "https://cdn/v.mp4",
        "dashUrl": "https://cdn/v.mpd",
        "audioUrl": "https://cdn/a.m4a",
        "userId": {"username": "alice"},
    }
    entry.update(overrides)
    return entry


def _service(entries: list[Any]) -> CatalogService:
    source = MagicMock()
    source.fetch_videos.return_value = entries
    return CatalogService(source)


class TestListVideos:
    def test_parses_entry(self) -> None:
        (video,) = _service([_raw()]).list_videos()
        assert video.id == "abc123"
        assert video.title == "Cats on Keyboards"
        assert video.video_url == "https://cdn/v.mp4"
        assert video.dash_url == "https://cdn/v.mpd"
        assert video.audio_url == "https://cdn/a.m4a"
        assert video.username == "alice"
        assert not video.is_live

    def test_missing_optional_fields(self) -> None:
        (video,) = _service([{"title": "Bare", "isLive": True}]).list_videos()
        assert video.is_live
        assert video.video_url is None
        assert video.username is None
        assert video.display_author == "Unknown"

    def test_malformed_entries_skipped(self) -> None:
        videos = _service([_raw(), "junk", {"title": 42}, _raw(title="Second")]).list_videos()
        assert [v.title for v in videos] == ["Cats on Keyboards", "Second"]

    def test_typed_errors_propagate(self) -> None:
        source = MagicMock()
        source.fetch_videos.side_effect = ApiUnavailableError("down")
        with pytest.raises(ApiUnavailableError, match="down"):
            CatalogService(source).list_videos()

    def test_unexpected_errors_wrapped(self) -> None:
        source = MagicMock()
        source.fetch_videos.side_effect = RuntimeError("boom")
        with pytest.raises(ApiUnavailableError, match="boom"):
            CatalogService(source).list_videos()


class TestSearch:
    def test_filter_by_title_or_author_case_insensitive(self) -> None:
        videos = [
            make_video(title="Morning Run", username="bob"),
            make_video(title="Evening Stream", username="RunnerX"),
            make_video(title="Cooking", username=None),
        ]
        assert [v.title for v in filter_videos(videos, "RUN")] == ["Morning Run", "Evening Stream"]

    def test_empty_query_matches_everything(self) -> None:
        videos = [make_video(title="a"), make_video(title="b")]
        assert filter_videos(videos, "   ") == videos

    def test_search_fetches_and_filters(self) -> None:
        service = _service([_raw(), _raw(title="Dogs")])
        assert [v.title for v in service.search("dog")] == ["Dogs"]


class TestResolveApiUrl:
    def test_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("SERIKA_API_URL", raising=False)
        assert resolve_api_url() == DEFAULT_API_URL

    def test_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SERIKA_API_URL", "http://localhost:3000/api/")
        assert resolve_api_url() == "http://localhost:3000/api"

    def test_override_wins(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SERIKA_API_URL", "http://env/api")
        assert resolve_api_url("http://flag/api") == "http://flag/api"


class TestSerikaApiClient:
    def _response(self, payload: Any = None, *, json_error: bool = False) -> MagicMock:
        response = MagicMock()
        response.raise_for_status.return_value = None
        if json_error:
            response.json.side_effect = ValueError("no json")
        else:
            response.json.return_value = payload
        return response

    def test_returns_video_list(self) -> None:
        client = SerikaApiClient("http://localhost:3000/api/")
        with patch("requests.get", return_value=self._response({"videos": [_raw()]})) as get:
            videos = client.fetch_videos()
        get.assert_called_once_with("http://localhost:3000/api/videos", timeout=30.0)
        assert videos == [_raw()]

    def test_connection_error_mentions_server(self) -> None:
        client = SerikaApiClient("http://localhost:3000/api")
        with patch("requests.get", side_effect=requests.exceptions.ConnectionError("refused")):
            with pytest.raises(ApiUnavailableError) as exc_info:
                client.fetch_videos()
        assert exc_info.value.hint is not None
        assert "Make sure the Serika server is running at http://localhost:3000/api" in exc_info.value.hint

    def test_timeout(self) -> None:
        client = SerikaApiClient("http://x/api", timeout=5)
        with patch("requests.get", side_effect=requests.exceptions.Timeout()):
            with pytest.raises(ApiUnavailableError, match="Timed out after 5s"):
                client.fetch_videos()

    def test_http_error(self) -> None:
        response = self._response()
        response.raise_for_status.side_effect = requests.exceptions.HTTPError("500 Server Error")
        with patch("requests.get", return_value=response):
            with pytest.raises(ApiUnavailableError, match="500"):
                SerikaApiClient("http://x/api").fetch_videos()

    def test_non_json_body(self) -> None:
        with patch("requests.get", return_value=self._response(json_error=True)):
            with pytest.raises(CatalogFormatError):
                SerikaApiClient("http://x/api").fetch_videos()

    @pytest.mark.parametrize("payload", [{"items": []}, [1, 2], {"videos": "nope"}])
    def test_missing_video_list(self, payload: Any) -> None:
        with patch("requests.get", return_value=self._response(payload)):
            with pytest.raises(CatalogFormatError):
                SerikaApiClient("http://x/api").fetch_videos()
