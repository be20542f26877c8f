# oauthbridge HTTP layer
# Created: 2026-10-17
#
# Bridge routes (/authorize, /callback, /token) are mounted under the configured
# base path; the versioned REST API lives at /api/v1/.
