"""GearGuard maintenance-request tracking service."""
