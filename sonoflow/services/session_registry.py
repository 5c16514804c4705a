"""Registry of live streaming sessions, fed by the session lifecycle topic."""

import logging
from typing import Dict, List, Any
from pubsub import pub

from ..models.session import SessionState, StateTransition
from ..transcription.publisher import SESSION_LIFECYCLE_TOPIC

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Tracks the current state of every session that has not ended yet."""

    def __init__(self, topic: str = SESSION_LIFECYCLE_TOPIC):
        """Initialize session registry.

        Args:
            topic: Topic carrying session state transitions
        """
        self.topic = topic
        self._states: Dict[str, SessionState] = {}

        pub.subscribe(self._on_transition, topic)
        logger.info(f"SessionRegistry initialized - subscribed to {topic}")

    def _on_transition(self, transition: StateTransition) -> None:
        """Handle a session state transition."""
        if transition.current.is_terminal:
            self._states.pop(transition.session_id, None)
            logger.debug(f"Session {transition.session_id} ended ({transition.current.value})")
        else:
            self._states[transition.session_id] = transition.current

    def active_count(self) -> int:
        return len(self._states)

    def snapshot(self) -> List[Dict[str, Any]]:
        """Current state of each live session."""
        return [
            {"session_id": session_id, "state": state.value}
            for session_id, state in self._states.items()
        ]

    def shutdown(self) -> None:
        """Stop listening for transitions."""
        if pub.isSubscribed(self._on_transition, self.topic):
            pub.unsubscribe(self._on_transition, self.topic)
        self._states.clear()
        logger.info("SessionRegistry shut down")
