"""Client for the YouTube Data API v3."""

import logging
from collections.abc import Mapping
from typing import Any

import httpx

from ..config.settings import YtubeConfig
from ..core.models import (
    FORBIDDEN_MESSAGE,
    MISSING_KEY_MESSAGE,
    NOT_FOUND_MESSAGE,
    RATE_LIMIT_MESSAGE,
    UNAUTHORIZED_MARKER,
    UNKNOWN_ERROR_MESSAGE,
    APIResponse,
    Callback,
    ErrorResult,
    new_error,
)

logger = logging.getLogger(__name__)

VIDEO_PARTS = ("snippet", "contentDetails", "statistics", "status")
CHANNEL_PARTS = ("snippet", "contentDetails", "statistics", "status", "topicDetails")
PLAYLIST_PARTS = ("snippet", "contentDetails", "status", "player", "id")
PLAYLIST_ITEM_PARTS = ("contentDetails", "id", "snippet", "status")
SEARCH_PARTS = ("snippet",)


class YtubeClient:
    """Builds and sends YouTube Data API requests.

    Parameters and parts staged with ``add_param``/``add_part`` (and the
    page token) apply to the next resource operation only. Each operation
    snapshots them into its own query, then resets the staged state to
    just the API key before the request goes out.
    """

    def __init__(self, config: YtubeConfig | None = None,
                 http_client: httpx.AsyncClient | None = None):
        """Initialize API client with configuration."""
        self.config = config or YtubeConfig()
        self._base_url = self.config.api.base_url
        self.params: dict[str, Any] = {}
        self.parts: list[str] = []

        self.client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(self.config.api.timeout),
            follow_redirects=True,
        )

        if self.config.api.api_key:
            self.set_key(self.config.api.api_key)

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.client.aclose()

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    @property
    def base_url(self) -> str:
        """API root every resource path is appended to."""
        return self._base_url

    def set_key(self, key: str) -> None:
        """Set the API key sent with every request."""
        self.add_param("key", key)

    def set_next_page_token(self, token: str) -> None:
        """Send ``token`` as ``pageToken`` on the next request."""
        self.add_param("pageToken", token)

    def add_part(self, name: str) -> None:
        """Stage an extra response part for the next request."""
        self.parts.append(name)

    def clear_parts(self) -> None:
        """Drop all staged parts."""
        self.parts = []

    def add_param(self, key: str, value: Any) -> None:
        """Stage an optional query parameter for the next request.

        See https://developers.google.com/youtube/v3/docs/search/list
        for the parameters the API understands.
        """
        self.params[key] = value

    def clear_params(self) -> None:
        """Clear every parameter but the key."""
        self.params = {"key": self.params.get("key")}

    def get_parts(self) -> str:
        """Staged parts as the comma-separated ``part`` value."""
        return ",".join(self.parts)

    def build_url(self, resource_path: str, params: Mapping[str, Any] | None = None) -> str:
        """Join the base URL, resource path and URL-encoded query."""
        query = dict(self.params if params is None else params)
        return str(httpx.URL(self.base_url + resource_path, params=query))

    def validate(self) -> ErrorResult | None:
        """Return an error when no API key has been set."""
        if not self.params.get("key"):
            return new_error(MISSING_KEY_MESSAGE)
        return None

    async def get_by_id(self, video_id: str, callback: Callback | None = None) -> APIResponse:
        """Video data from ID."""
        return await self._dispatch("videos", VIDEO_PARTS, {"id": video_id}, callback)

    async def get_channel_by_id(self, channel_id: str, callback: Callback | None = None) -> APIResponse:
        """Channel data from ID."""
        return await self._dispatch("channels", CHANNEL_PARTS, {"id": channel_id}, callback)

    async def get_playlists_by_id(self, playlist_id: str, callback: Callback | None = None) -> APIResponse:
        """Playlist data from ID.

        https://developers.google.com/youtube/v3/docs/playlists/list
        """
        return await self._dispatch("playlists", PLAYLIST_PARTS, {"id": playlist_id}, callback)

    async def get_playlist_items_by_id(self, playlist_id: str, max_results: int | Callback | None = None,
                                       callback: Callback | None = None) -> APIResponse:
        """Items of a playlist.

        ``max_results`` may be omitted by passing the callback in its place,
        in which case the API default page size applies.

        https://developers.google.com/youtube/v3/docs/playlistItems/list
        """
        if callable(max_results):
            callback = max_results
            max_results = None

        params: dict[str, Any] = {"playlistId": playlist_id}
        if max_results:
            params["maxResults"] = max_results

        return await self._dispatch("playlistItems", PLAYLIST_ITEM_PARTS, params, callback)

    async def search(self, query: str, max_results: int,
                     params: Mapping[str, Any] | Callback | None = None,
                     callback: Callback | None = None) -> APIResponse:
        """Search videos, channels and playlists.

        Every entry of ``params`` whose value is not None is forwarded as-is,
        so any filter the search endpoint accepts (``order``, ``regionCode``,
        ``relevanceLanguage``, ...) can be passed through. The callback may
        take the place of ``params``.
        """
        if not isinstance(params, Mapping):
            if callable(params):
                callback = params
            params = {}

        search_params: dict[str, Any] = {"q": query, "maxResults": max_results}
        for key, value in params.items():
            if value is not None:
                search_params[key] = value

        return await self._dispatch("search", SEARCH_PARTS, search_params, callback)

    async def related(self, video_id: str, max_results: int, callback: Callback | None = None) -> APIResponse:
        """Videos related to ``video_id``, ordered by relevance."""
        params = {
            "relatedToVideoId": video_id,
            "maxResults": max_results,
            "type": "video",
            "order": "relevance",
        }
        return await self._dispatch("search", SEARCH_PARTS, params, callback)

    async def get_most_popular(self, max_results: int, callback: Callback | None = None) -> APIResponse:
        """Videos from the most popular chart."""
        return await self._most_popular(max_results, {}, callback)

    async def get_most_popular_by_category(self, max_results: int, video_category_id: str,
                                           callback: Callback | None = None) -> APIResponse:
        """Most popular videos within a category.

        Category ids: https://developers.google.com/youtube/v3/docs/videoCategories/list
        """
        return await self._most_popular(max_results, {"videoCategoryId": video_category_id}, callback)

    async def get_most_popular_by_category_and_region(self, max_results: int, video_category_id: str,
                                                      region: str,
                                                      callback: Callback | None = None) -> APIResponse:
        """Most popular videos within a category for one region."""
        params = {"videoCategoryId": video_category_id, "regionCode": region}
        return await self._most_popular(max_results, params, callback)

    async def _most_popular(self, max_results: int, extra: dict[str, Any],
                            callback: Callback | None) -> APIResponse:
        params = {"maxResults": max_results, "chart": "mostPopular", **extra}
        return await self._dispatch("videos", VIDEO_PARTS, params, callback)

    async def _dispatch(self, resource_path: str, parts: tuple[str, ...],
                        resource_params: dict[str, Any], callback: Callback | None) -> APIResponse:
        """Validate, build the call-local query, reset staged state and send."""
        error = self.validate()
        if error is not None:
            self._reset()
            return APIResponse(success=False, error=error).deliver(callback)

        query = dict(self.params)
        query["part"] = ",".join([*self.parts, *parts])
        query.update(resource_params)
        try:
            url = self.build_url(resource_path, query)
        except httpx.InvalidURL as e:
            logger.error(f"Cannot build URL for '{resource_path}' from {self.base_url!r}: {e}")
            return APIResponse(success=False, error=UNKNOWN_ERROR_MESSAGE).deliver(callback)
        finally:
            self._reset()

        return await self.request(url, callback)

    def _reset(self) -> None:
        self.clear_params()
        self.clear_parts()

    async def request(self, url: str, callback: Callback | None = None) -> APIResponse:
        """Send one GET and normalize the outcome.

        The callback, if any, is invoked exactly once with either the error
        or ``(None, data)``.
        """
        try:
            logger.debug(f"GET {_redact(url)}")
            response = await self.client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error(f"Request to {_redact(url)} failed: {e}")
            return APIResponse(success=False, error=UNKNOWN_ERROR_MESSAGE).deliver(callback)

        status = response.status_code
        if not 200 <= status < 300:
            error = self._describe_failure(response)
            logger.warning(f"HTTP {status} from {_redact(url)}: {error}")
            return APIResponse(success=False, error=error, status_code=status).deliver(callback)

        data = _decode(response)
        if data is None:
            data = {}

        if status == 200:
            return APIResponse(success=True, data=data, status_code=status).deliver(callback)

        error = data.get("error") if isinstance(data, dict) else None
        return APIResponse(success=False, error=error, status_code=status).deliver(callback)

    def _describe_failure(self, response: httpx.Response) -> str:
        """Map a non-2xx response to the message handed to callers."""
        status = response.status_code

        if status == 404:
            return NOT_FOUND_MESSAGE

        if status == 403:
            if not response.content:
                return UNKNOWN_ERROR_MESSAGE
            message = _error_message(_decode(response))
            if message and UNAUTHORIZED_MARKER in message:
                return FORBIDDEN_MESSAGE
            return RATE_LIMIT_MESSAGE

        message = _error_message(_decode(response))
        if message:
            return message

        return UNKNOWN_ERROR_MESSAGE


def _decode(response: httpx.Response) -> Any | None:
    """Decode a JSON body, None when it is not valid JSON."""
    try:
        return response.json()
    except ValueError:
        return None


def _error_message(body: Any) -> str | None:
    """Pull ``error.message`` out of a decoded error body."""
    if not isinstance(body, dict):
        return None
    error = body.get("error")
    if not isinstance(error, dict):
        return None
    message = error.get("message")
    return message if isinstance(message, str) else None


def _redact(url: str) -> str:
    """Hide the API key in logged URLs."""
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL:
        return url.split("?", 1)[0]
    if "key" not in parsed.params:
        return url
    return str(parsed.copy_set_param("key", "***"))
