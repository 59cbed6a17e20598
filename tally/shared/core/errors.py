"""Exception types shared across the widget and application sides."""


class TallyError(Exception):
    """Base class for Tally errors."""


class ConfigurationError(TallyError, ValueError):
    """Merged configuration failed validation."""


class StoreWriteError(TallyError):
    """A Shared State Store backend refused or failed a write."""

    def __init__(self, key: str, message: str = "write rejected"):
        super().__init__(f"{message}: {key}")
        self.key = key


class MethodNotImplemented(TallyError):
    """An inbound method channel call named a method nobody handles."""

    def __init__(self, channel: str, method: str):
        super().__init__(f"{channel}: method '{method}' not implemented")
        self.channel = channel
        self.method = method
