"""
Viewer identity for reactions.

A random identifier persisted in the local state directory, so a viewer's
reactions can be recognized across runs.
"""

import logging
import uuid
from pathlib import Path
from typing import Optional

from ..config import config


SSR_USER_HASH = "ssr-default-hash"


def generate_user_hash(namespace: Optional[str] = None, state_dir: Optional[str] = None,
                       interactive: bool = True) -> str:
    """
    Get or create the persistent user hash.

    Args:
        namespace: Key under which the hash is stored (defaults to config value)
        state_dir: Directory holding the state file (defaults to config value)
        interactive: False for server-side rendering, which has no viewer

    Returns:
        The stored hash, a newly stored hash, or a session-only hash when the
        state directory is unusable
    """
    if not interactive:
        return SSR_USER_HASH

    namespace = namespace or config.user_hash_namespace
    state_file = Path(state_dir or config.state_directory) / f"{namespace}.uid"

    try:
        if state_file.exists():
            stored = state_file.read_text(encoding='utf-8').strip()
            if stored:
                return stored

        user_hash = str(uuid.uuid4())
        state_file.parent.mkdir(parents=True, exist_ok=True)
        state_file.write_text(user_hash, encoding='utf-8')
        return user_hash

    except OSError as e:
        logging.warning(f"Cannot persist user hash in {state_file}, using a session id: {e}")
        return str(uuid.uuid4())
