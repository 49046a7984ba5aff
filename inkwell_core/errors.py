from __future__ import annotations


class InkwellError(RuntimeError):
    pass


class ConfigurationError(ValueError):
    """Invalid drawing parameters, rejected before the surface is touched."""


class UnsupportedCapabilityError(InkwellError):
    def __init__(self, capability: str, surface: object | None = None) -> None:
        self.capability = capability
        self.surface_name = type(surface).__name__ if surface is not None else None
        if self.surface_name:
            message = f"{capability} is not supported by {self.surface_name}"
        else:
            message = f"{capability} is not supported"
        super().__init__(message)
