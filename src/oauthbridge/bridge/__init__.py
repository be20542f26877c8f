# Bridge core — authorize/callback phases of the upstream OAuth round trip.
# Created: 2026-10-17
