"""Session lifecycle publisher for pub/sub event publishing."""

import logging
from pubsub import pub

from ..models.session import SessionState, StateTransition

logger = logging.getLogger(__name__)

SESSION_LIFECYCLE_TOPIC = "session.lifecycle"


class SessionLifecyclePublisher:
    """Publishes session state transitions using pubsub.pub."""

    def __init__(self, topic: str = SESSION_LIFECYCLE_TOPIC):
        """Initialize lifecycle publisher.

        Args:
            topic: Pub/sub topic name for state transitions
        """
        self.topic = topic
        logger.info(f"SessionLifecyclePublisher initialized with topic: {topic}")

    def publish_transition(self, session_id: str, previous: SessionState, current: SessionState) -> None:
        """Publish a state transition to the pub/sub topic.

        Args:
            session_id: Session that changed state
            previous: State before the transition
            current: State after the transition
        """
        transition = StateTransition(session_id=session_id, previous=previous, current=current)
        pub.sendMessage(self.topic, transition=transition)
        logger.debug(f"Published transition for {session_id}: {previous.value} -> {current.value}")
