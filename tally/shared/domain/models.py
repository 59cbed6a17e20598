"""Counter data model shared by the widget and the application."""

from __future__ import annotations

from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

# Shared State Store keys
KEY_PRODUCT_NAME = "widget_product_name"
KEY_CURRENT_COUNT = "widget_current_count"
KEY_PRODUCT_ID = "widget_product_id"
KEY_ACTION = "widget_action"
KEY_ACTION_PRODUCT_ID = "widget_action_product_id"

# Platform action identifiers
ACTION_INCREASE = "ACTION_INCREASE"
ACTION_DECREASE = "ACTION_DECREASE"
ACTION_RESET = "ACTION_RESET"
ACTION_OPEN_PRODUCT = "ACTION_OPEN_PRODUCT"

EXTRA_PRODUCT_ID = "product_id"

WidgetInstanceId = int


class CommandKind(str, Enum):
    """Counter command carried in the pending-command slot."""
    INCREASE = "increase"
    DECREASE = "decrease"
    RESET = "reset"

    @classmethod
    def from_action(cls, action: Optional[str]) -> Optional["CommandKind"]:
        return _ACTION_TO_KIND.get(action or "")

    @classmethod
    def parse(cls, value: object) -> Optional["CommandKind"]:
        try:
            return cls(value)
        except ValueError:
            return None

    @property
    def action(self) -> str:
        return _KIND_TO_ACTION[self]


_ACTION_TO_KIND = {
    ACTION_INCREASE: CommandKind.INCREASE,
    ACTION_DECREASE: CommandKind.DECREASE,
    ACTION_RESET: CommandKind.RESET,
}
_KIND_TO_ACTION = {kind: action for action, kind in _ACTION_TO_KIND.items()}

RECOGNIZED_ACTIONS = frozenset([*_ACTION_TO_KIND, ACTION_OPEN_PRODUCT])


class CounterRecord(BaseModel):
    """Authoritative per-product counter, owned by the application."""
    model_config = ConfigDict(frozen=True)

    product_id: str
    product_name: str
    current_count: int = Field(default=0, ge=0)


class PendingCommand(BaseModel):
    """Most recent not-yet-applied button press."""
    model_config = ConfigDict(frozen=True)

    kind: CommandKind
    product_id: str


class NavigationRequest(BaseModel):
    """One-shot request to open the application on a product."""
    model_config = ConfigDict(frozen=True)

    action: Literal["ACTION_OPEN_PRODUCT"] = ACTION_OPEN_PRODUCT
    product_id: str

    def to_payload(self) -> dict:
        return {"action": self.action, "product_id": self.product_id}
