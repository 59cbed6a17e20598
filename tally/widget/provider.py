"""Widget provider: the entry points the host calls on the widget process.

The host may create a fresh provider for every callback, so nothing here is
carried between calls. Counter values and pending commands live in the
Shared State Store only.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from tally.shared.core.configuration import WidgetConfig
from tally.shared.domain.models import ACTION_OPEN_PRODUCT, CommandKind, WidgetInstanceId
from tally.shared.infrastructure.persistence.state_store import SharedStateStore
from tally.shared.infrastructure.platform import ACTION_APPWIDGET_UPDATE, EXTRA_APPWIDGET_IDS, Intent, WidgetHost

from .dispatcher import CommandDispatcher
from .renderer import WidgetSurfaceRenderer

logger = logging.getLogger(__name__)


class CounterWidgetProvider:
    """Answers ``on_update`` batches and ``on_receive`` broadcasts."""

    def __init__(
        self,
        store: SharedStateStore,
        host: WidgetHost,
        config: Optional[WidgetConfig] = None,
    ):
        self.store = store
        self.host = host
        self.config = config or WidgetConfig()
        self.renderer = WidgetSurfaceRenderer(store, self.config)
        self.dispatcher = CommandDispatcher(
            store,
            refresh=self.refresh_all if self.config.refresh_on_dispatch else None,
        )

    def on_update(self, instance_ids: Iterable[WidgetInstanceId]) -> int:
        """Render and push each instance independently."""
        count = 0
        for instance_id in instance_ids:
            self.host.update_app_widget(instance_id, self.renderer.render(instance_id))
            count += 1
        return count

    def refresh_all(self) -> int:
        return self.on_update(self.host.get_instance_ids())

    def on_receive(self, intent: Intent) -> bool:
        """Handle a broadcast. Returns True when a command was dispatched."""
        logger.debug(f"on_receive: action={intent.action}")

        if intent.action == ACTION_APPWIDGET_UPDATE:
            ids = intent.extras.get(EXTRA_APPWIDGET_IDS)
            self.on_update(ids if ids is not None else self.host.get_instance_ids())
            return False

        product_id = intent.product_id
        if product_id is None:
            logger.error(f"Broadcast {intent.action} arrived without product_id, ignoring")
            return False

        kind = CommandKind.from_action(intent.action)
        if kind is None:
            if intent.action == ACTION_OPEN_PRODUCT:
                logger.info(f"Open request for {product_id} must go through the launcher, ignoring broadcast")
            else:
                logger.info(f"Unknown action: {intent.action}, ignoring")
            return False

        return self.dispatcher.dispatch(kind, product_id)
