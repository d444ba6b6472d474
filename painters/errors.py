from __future__ import annotations


class ProviderError(RuntimeError):
    """Base class for anything that went wrong talking to the scenario provider."""


class TransportFailure(ProviderError):
    """The request could not be sent or the response could not be retrieved."""


class MalformedResponse(ProviderError):
    """A reply arrived but was empty, not JSON, or missing required fields."""


class ScenarioValidationError(ProviderError):
    """The reply parsed fine but does not describe a playable scenario."""


class SessionStateError(ValueError):
    pass


class UnknownCharacterError(ValueError):
    pass
