# oauthbridge — OAuth authorization-code bridge with GitHub as the identity provider.
# Created: 2026-10-17

__version__ = "0.1.0"
