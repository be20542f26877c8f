# Downstream OAuth2 Authorization Provider.
# Created: 2026-10-17
