"""
Factory function to create the configured identity provider.

Reads AUTH_PROVIDER to pick the implementation:
- "local" (default): in-memory accounts
- "supabase": Supabase Auth
"""

import os
from typing import Optional

from ..storage.exceptions import ConfigurationError
from .base import IdentityProvider


# Singleton instance
_provider_instance: Optional[IdentityProvider] = None


def get_identity_provider() -> IdentityProvider:
    """
    Get or create the identity provider.

    Raises:
        ConfigurationError: Unknown AUTH_PROVIDER or missing credentials
    """
    global _provider_instance

    if _provider_instance is not None:
        return _provider_instance

    provider_type = os.environ.get('AUTH_PROVIDER', 'local').lower()
    print(f"[*] Auth provider: {provider_type}")

    if provider_type == 'local':
        from .local import LocalIdentityProvider
        _provider_instance = LocalIdentityProvider()

    elif provider_type == 'supabase':
        from .supabase_auth import SupabaseIdentityProvider
        _provider_instance = SupabaseIdentityProvider()

    else:
        raise ConfigurationError(
            f"Unknown AUTH_PROVIDER: {provider_type}. "
            f"Valid options: local, supabase"
        )

    return _provider_instance


def reset_identity_provider() -> None:
    """Reset the provider singleton (for testing)."""
    global _provider_instance
    if _provider_instance is not None:
        _provider_instance.close()
        _provider_instance = None
