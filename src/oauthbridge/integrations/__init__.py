# Upstream provider clients.
# Created: 2026-10-17
