"""
Solar dashboard backend package.

Proxies the iSolarCloud OpenAPI with server-side credentials and converts
cumulative inverter energy readings into per-period production, growth and
summary figures for the dashboard views.

CHANGELOG:
- 2026-10-12: Initial creation (STORY-001)

TODO:
- None
"""
