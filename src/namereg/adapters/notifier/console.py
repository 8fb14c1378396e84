"""
Console event notifier adapter - Implements EventNotifier protocol.

This module provides a logging-based implementation of the domain's
event notifier port, writing each registry event to the log for
downstream consumers that tail it.
"""

import logging

from namereg.domain.ports import RegistryEvent

logger = logging.getLogger(__name__)


class ConsoleEventNotifier:
    """
    Implements EventNotifier protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def publish(self, event: RegistryEvent) -> None:
        """
        Log a registry event at INFO level.

        Args:
            event: Committed state change
        """
        logger.info(
            "[EVENT] %s name=%s owner=%s expires_at=%s",
            event.kind.value,
            event.name,
            event.owner,
            event.expires_at,
        )
