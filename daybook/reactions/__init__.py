"""Emoji reactions: backend client, request batching and viewer identity."""

from .store import ReactionStore, ReactionStoreError, group_by_content_id
from .batcher import ReactionsBatcher, LoopScheduler
from .identity import generate_user_hash

__all__ = [
    "ReactionStore",
    "ReactionStoreError",
    "group_by_content_id",
    "ReactionsBatcher",
    "LoopScheduler",
    "generate_user_hash"
]
