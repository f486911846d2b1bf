"""Health check endpoint handler."""

import logging

from lexbound.core.llm_connector import LLMConnector
from lexbound.lib.config import ConfigLoader
from ..models.health import ConfigHealth, HealthServices, HealthStatus, TextCompletionHealth

logger = logging.getLogger(__name__)


def _config_health(config: ConfigLoader) -> ConfigHealth:
    if not config.config:
        return ConfigHealth(
            status="unhealthy",
            config_path=str(config.config_path),
            message="Configuration not loaded",
        )
    from_file = config.config_path.exists()
    return ConfigHealth(
        status="healthy",
        config_path=str(config.config_path),
        from_file=from_file,
        message="Configuration loaded" if from_file else "Using built-in defaults",
    )


async def _text_completion_health(
    config: ConfigLoader, connector: LLMConnector | None, live_check: bool
) -> TextCompletionHealth:
    model = config.get_model_settings()

    if connector is None:
        return TextCompletionHealth(
            status="unhealthy",
            provider=model.provider,
            model_name=model.model_name,
            message=f"Provider '{model.provider}' not configured",
        )

    if not live_check:
        return TextCompletionHealth(
            status="unknown",
            provider=model.provider,
            model_name=model.model_name,
            message="Configured, not checked live",
        )

    healthy = await connector.check_health()
    return TextCompletionHealth(
        status="healthy" if healthy else "unhealthy",
        provider=model.provider,
        model_name=model.model_name,
        checked_live=True,
        message="" if healthy else "Provider did not answer the live check",
    )


async def check_health(
    config: ConfigLoader, connector: LLMConnector | None = None, live_check: bool = False
) -> HealthStatus:
    """Check health of the API and its text-completion provider.

    Args:
        config: Application configuration
        connector: Configured provider, if one could be built
        live_check: Send a minimal request to the provider

    Returns:
        HealthStatus with the config and text-completion states
    """
    services = HealthServices(
        config=_config_health(config),
        text_completion=await _text_completion_health(config, connector, live_check),
    )
    statuses = [services.config.status, services.text_completion.status]

    if all(s == "healthy" for s in statuses):
        overall_status = "healthy"
    elif all(s == "unhealthy" for s in statuses):
        overall_status = "unhealthy"
    else:
        overall_status = "degraded"

    logger.info(
        f"Health check: {overall_status}",
        extra={
            "extra_fields": {
                "config": services.config.status,
                "text_completion": services.text_completion.status,
            }
        },
    )

    return HealthStatus(status=overall_status, services=services)
