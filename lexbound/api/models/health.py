"""Health check models."""

from typing import Literal, Optional

from pydantic import BaseModel

from lexbound.version import __version__

ComponentState = Literal["healthy", "unhealthy", "unknown"]


class ConfigHealth(BaseModel):
    """Whether lexbound.yaml was found and parsed."""

    status: ComponentState
    config_path: str
    from_file: bool = False
    message: str = ""


class TextCompletionHealth(BaseModel):
    """State of the configured text-completion provider.

    ``unknown`` means a provider is wired up but was not checked live; pass
    ``?live=true`` to send it a minimal request.
    """

    status: ComponentState
    provider: str
    model_name: Optional[str] = None
    checked_live: bool = False
    message: str = ""


class HealthServices(BaseModel):
    config: ConfigHealth
    text_completion: TextCompletionHealth


class HealthStatus(BaseModel):
    """Overall health status."""

    status: Literal["healthy", "degraded", "unhealthy"]
    services: HealthServices
    version: str = __version__
