"""
Factory for creating topology provider instances.
"""

import logging

from ..models.settings import ProviderSettings
from ..validation import ValidationError
from .base import TopologyQueryProvider
from .static import StaticTopologyProvider

logger = logging.getLogger(__name__)

SUPPORTED_PROVIDERS = ["static"]


def create_provider(settings: ProviderSettings) -> TopologyQueryProvider:
    """
    Create a provider instance based on the configured provider type.

    Args:
        settings: The ``[provider]`` settings section

    Returns:
        TopologyQueryProvider instance

    Raises:
        ValidationError: If the provider type is unsupported or misconfigured
    """
    provider_type = settings.type.lower()
    if provider_type == "static":
        if settings.inventory_path is None:
            raise ValidationError(
                "provider.inventory_path is required for the static provider",
                field_name="provider.inventory_path",
            )
        logger.debug(f"Creating StaticTopologyProvider from {settings.inventory_path}")
        return StaticTopologyProvider.from_file(settings.inventory_path)
    else:
        raise ValidationError(
            f"Unsupported provider type: {settings.type} (supported: {SUPPORTED_PROVIDERS})",
            field_name="provider.type",
            value=settings.type,
        )
