class TariffError(Exception):
    """Base exception for tariff resolution and pricing."""


class InvalidInput(TariffError, ValueError):
    """Malformed argument or rule: a programmer/config error, never coerced."""

    def __init__(self, argument, message):
        super().__init__(f"{argument}: {message}")
        self.argument = argument
        self.message = message
