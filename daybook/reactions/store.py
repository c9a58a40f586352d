"""
Emoji reactions backend for Daybook.

Talks to the Supabase PostgREST RPC endpoints that store reaction counts.
When no backend is configured every read is empty and every write is a no-op.
"""

import logging
from collections import defaultdict
from typing import Any, Dict, List, Optional

import httpx

from ..config import config
from ..models import ReactionRow, ToggleResult


class ReactionStoreError(Exception):
    """Raised when the reactions backend cannot be reached or answers with an error."""


def group_by_content_id(rows: List[ReactionRow]) -> Dict[str, List[ReactionRow]]:
    """
    Group batch rows by the content they belong to.

    Args:
        rows: Rows returned by a batch read

    Returns:
        Mapping of content id to its rows, in response order
    """
    grouped: Dict[str, List[ReactionRow]] = defaultdict(list)
    for row in rows:
        if row.content_id is not None:
            grouped[row.content_id].append(row)
    return dict(grouped)


class ReactionStore:
    """
    Client for the reactions RPC functions.
    """

    def __init__(self, supabase_url: Optional[str] = None, supabase_key: Optional[str] = None,
                 client: Optional[httpx.AsyncClient] = None, timeout: Optional[float] = None):
        """
        Initialize the reaction store.

        Args:
            supabase_url: Project URL (defaults to config / SUPABASE_URL)
            supabase_key: Anon key (defaults to config / SUPABASE_KEY)
            client: Optional httpx client, e.g. with a mock transport
            timeout: Request timeout in seconds (defaults to config value)
        """
        self.supabase_url = (supabase_url if supabase_url is not None else config.supabase_url).rstrip("/")
        self.supabase_key = supabase_key if supabase_key is not None else config.supabase_key
        self.configured = bool(self.supabase_url and self.supabase_key)

        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=timeout or config.reactions_timeout)

        if not self.configured:
            logging.info("Supabase not configured - emoji reactions will be disabled")

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client if this store created it."""
        if self._owns_client:
            await self.client.aclose()

    async def _rpc(self, function: str, params: Dict[str, Any]) -> Any:
        """
        Call a PostgREST RPC function.

        Args:
            function: Database function name
            params: Named arguments of the function

        Returns:
            Decoded JSON response

        Raises:
            ReactionStoreError: If the request fails
        """
        try:
            response = await self.client.post(
                f"{self.supabase_url}/rest/v1/rpc/{function}",
                json=params,
                headers={
                    "apikey": self.supabase_key,
                    "Authorization": f"Bearer {self.supabase_key}",
                    "Content-Type": "application/json"
                }
            )
            response.raise_for_status()
            return response.json()

        except httpx.RequestError as e:
            raise ReactionStoreError(f"Failed to connect to reactions backend: {e}") from e
        except httpx.HTTPStatusError as e:
            raise ReactionStoreError(f"Reactions request {function} failed: {e}") from e
        except ValueError as e:
            raise ReactionStoreError(f"Invalid response from {function}: {e}") from e

    @staticmethod
    def _to_rows(data: Any, function: str) -> List[ReactionRow]:
        if data is None:
            return []
        if not isinstance(data, list):
            raise ReactionStoreError(f"Unexpected payload from {function}: {type(data).__name__}")
        try:
            return [ReactionRow.model_validate(item) for item in data]
        except ValueError as e:
            raise ReactionStoreError(f"Invalid row from {function}: {e}") from e

    async def fetch_reactions_many(self, content_ids: List[str],
                                   user_hash: Optional[str] = None) -> List[ReactionRow]:
        """
        Read reaction counts of several pieces of content in one call.

        Args:
            content_ids: Content identifiers
            user_hash: Viewer identity, used to flag the viewer's own reactions

        Returns:
            Rows tagged with ``content_id``

        Raises:
            ReactionStoreError: If the call fails
        """
        if not self.configured:
            return []

        data = await self._rpc("get_content_reactions_many", {
            "p_content_ids": content_ids,
            "p_user_hash": user_hash
        })
        return self._to_rows(data, "get_content_reactions_many")

    async def fetch_reactions_direct(self, content_id: str,
                                     user_hash: Optional[str] = None) -> List[ReactionRow]:
        """
        Read the reaction counts of one piece of content.

        Errors are logged and yield an empty list.
        """
        if not self.configured:
            return []

        try:
            data = await self._rpc("get_content_reactions", {
                "p_content_id": content_id,
                "p_user_hash": user_hash
            })
            return self._to_rows(data, "get_content_reactions")
        except ReactionStoreError as e:
            logging.error(f"Error fetching reactions: {e}")
            return []

    async def toggle_reaction(self, content_id: str, emoji: str,
                              user_hash: str) -> Optional[ToggleResult]:
        """
        Toggle the viewer's reaction with one emoji.

        Args:
            content_id: Content identifier
            emoji: The emoji to toggle
            user_hash: Viewer identity

        Returns:
            The new count and state, or None when unconfigured or empty

        Raises:
            ReactionStoreError: If the call fails (including server-side rate limits)
        """
        if not self.configured:
            logging.warning("Supabase not configured - emoji reaction toggle skipped")
            return None

        data = await self._rpc("toggle_emoji_reaction", {
            "p_content_id": content_id,
            "p_emoji": emoji,
            "p_user_hash": user_hash
        })

        if not data:
            return None
        try:
            return ToggleResult.model_validate(data[0] if isinstance(data, list) else data)
        except ValueError as e:
            raise ReactionStoreError(f"Invalid toggle result: {e}") from e
