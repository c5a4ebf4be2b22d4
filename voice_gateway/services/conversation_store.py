"""
Per-conversation token and session state for the agent platform.

Each conversation key owns one ``ConversationState``. Callers hold
``state.lock`` for the whole of a send, which serializes sequence ids within a
conversation and means at most one token refresh or session creation is ever in
flight per key; callers that were waiting simply find the fresh token/session.

Conversations are forgotten after ``idle_ttl`` seconds without a request, and
the least recently used idle conversation is dropped once ``max_conversations``
is reached. A conversation whose lock is held is never dropped.
"""

import logging
import threading
import time
from collections import OrderedDict
from contextlib import contextmanager
from typing import Callable, Iterator, List, Optional

from voice_gateway.config.constants import CONVERSATION_IDLE_TTL, LOGGER_NAME, MAX_CONVERSATIONS
from voice_gateway.models.agent_schemas import AuthToken, Session

logger = logging.getLogger(LOGGER_NAME)


class ConversationState:
    """Token and session cached for one conversation key."""

    def __init__(self, key: str, now: float = 0.0):
        self.key = key
        self.token: Optional[AuthToken] = None
        self.session: Optional[Session] = None
        self.lock = threading.RLock()
        self.last_used = now

    @property
    def has_session(self) -> bool:
        return self.session is not None and bool(self.session.session_id)

    @property
    def busy(self) -> bool:
        """True if another thread currently holds the lock."""
        if not self.lock.acquire(blocking=False):
            return True
        self.lock.release()
        return False

    def invalidate_session(self) -> None:
        if self.session is not None:
            logger.info(f"[{self.key}] Dropping session {self.session.session_id}")
        self.session = None

    def reset(self) -> None:
        self.token = None
        self.session = None


class ConversationStore:
    """
    Registry of conversation states keyed by the caller's conversation id.

    Lookups that create a new state are guarded by a store-level lock so two
    first requests for the same key end up sharing one state. A state lock is
    never waited on while the store lock is held.

    Args:
        idle_ttl: Seconds without a lookup after which a conversation is dropped
        max_conversations: Number of conversations kept before the least recently
            used idle one is dropped
        clock: Monotonic time source
    """

    def __init__(
        self,
        idle_ttl: float = CONVERSATION_IDLE_TTL,
        max_conversations: int = MAX_CONVERSATIONS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.idle_ttl = idle_ttl
        self.max_conversations = max_conversations
        self._clock = clock
        self._states: "OrderedDict[str, ConversationState]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: str) -> ConversationState:
        with self._lock:
            now = self._clock()
            self._evict_expired(now)

            state = self._states.get(key)
            if state is None:
                self._evict_overflow()
                state = ConversationState(key, now)
                self._states[key] = state
                logger.debug(f"Created conversation state for key {key}")
            else:
                state.last_used = now
                self._states.move_to_end(key)
            return state

    @contextmanager
    def locked(self, key: str) -> Iterator[ConversationState]:
        """
        Hold the lock of the conversation currently registered under ``key``.

        If the state was discarded or evicted while waiting for its lock, the
        lookup is repeated so the caller never works on a detached state.
        """
        while True:
            state = self.get(key)
            state.lock.acquire()
            with self._lock:
                current = self._states.get(key) is state
            if current:
                break
            state.lock.release()

        try:
            yield state
        finally:
            state.lock.release()

    def discard(self, key: str) -> bool:
        """
        Forget a conversation. Returns True if it existed.

        Waits for a send in progress on that conversation to finish first.
        """
        with self._lock:
            state = self._states.get(key)
        if state is None:
            return False

        with state.lock:
            with self._lock:
                if self._states.get(key) is state:
                    del self._states[key]
            state.reset()
        logger.info(f"Discarded conversation state for key {key}")
        return True

    def clear(self) -> None:
        with self._lock:
            self._states.clear()

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._states)

    def _evict_expired(self, now: float) -> None:
        for key, state in list(self._states.items()):
            if now - state.last_used < self.idle_ttl:
                # Ordered by last use, so everything after this is fresher
                break
            if state.busy:
                continue
            del self._states[key]
            logger.info(f"Conversation {key} idle for {now - state.last_used:.0f}s, forgetting it")

    def _evict_overflow(self) -> None:
        if len(self._states) < self.max_conversations:
            return
        for key, state in list(self._states.items()):
            if not state.busy:
                del self._states[key]
                logger.info(f"Conversation limit {self.max_conversations} reached, forgetting {key}")
                return
        logger.warning(f"All {len(self._states)} conversations are busy, exceeding the limit")

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._states

    def __len__(self) -> int:
        with self._lock:
            return len(self._states)
