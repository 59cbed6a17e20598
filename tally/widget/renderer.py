"""Widget Surface Renderer: turns Shared State Store contents into snapshots."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from tally.shared.core.configuration import WidgetConfig
from tally.shared.domain.models import (
    EXTRA_PRODUCT_ID,
    KEY_CURRENT_COUNT,
    KEY_PRODUCT_ID,
    KEY_PRODUCT_NAME,
    CommandKind,
    WidgetInstanceId,
)
from tally.shared.infrastructure.persistence.state_store import SharedStateStore
from tally.shared.infrastructure.platform import (
    VIEW_BUTTON_DECREASE,
    VIEW_BUTTON_INCREASE,
    VIEW_BUTTON_RESET,
    VIEW_CLICKABLE_AREA,
    Binding,
    BindingKind,
    Intent,
    WidgetSnapshot,
    open_product_intent,
    open_request_code,
)

logger = logging.getLogger(__name__)

_BUTTON_VIEWS = {
    CommandKind.INCREASE: VIEW_BUTTON_INCREASE,
    CommandKind.DECREASE: VIEW_BUTTON_DECREASE,
    CommandKind.RESET: VIEW_BUTTON_RESET,
}


class WidgetSurfaceRenderer:
    """Builds one display snapshot per widget instance.

    Rendering only reads the store. The count shown is whatever the
    application last wrote; nothing here does arithmetic on it.
    """

    def __init__(self, store: SharedStateStore, config: Optional[WidgetConfig] = None):
        self.store = store
        self.config = config or WidgetConfig()

    def render(self, instance_id: WidgetInstanceId) -> WidgetSnapshot:
        product_name = self.store.get_str(KEY_PRODUCT_NAME, self.config.placeholder_title)
        current_count = self.store.get_int(KEY_CURRENT_COUNT, 0)
        product_id = self.store.get_str(KEY_PRODUCT_ID, "")

        bindings: Dict[str, Binding] = {
            view_id: self._command_binding(kind, product_id)
            for kind, view_id in _BUTTON_VIEWS.items()
        }
        bindings[VIEW_CLICKABLE_AREA] = Binding(
            kind=BindingKind.ACTIVITY,
            request_code=open_request_code(product_id),
            intent=open_product_intent(product_id),
        )

        logger.debug(f"Rendered instance {instance_id}: {product_name}={current_count} ({product_id!r})")
        return WidgetSnapshot(
            instance_id=instance_id,
            title=product_name,
            count_text=str(current_count),
            bindings=bindings,
        )

    def render_all(self, instance_ids: Iterable[WidgetInstanceId]) -> List[WidgetSnapshot]:
        return [self.render(instance_id) for instance_id in instance_ids]

    def _command_binding(self, kind: CommandKind, product_id: str) -> Binding:
        request_codes = {
            CommandKind.INCREASE: self.config.increase_request_code,
            CommandKind.DECREASE: self.config.decrease_request_code,
            CommandKind.RESET: self.config.reset_request_code,
        }
        return Binding(
            kind=BindingKind.BROADCAST,
            request_code=request_codes[kind],
            intent=Intent(action=kind.action, extras={EXTRA_PRODUCT_ID: product_id}),
        )
