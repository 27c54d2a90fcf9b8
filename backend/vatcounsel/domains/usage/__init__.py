"""Usage domain: plan entitlements, accounting periods and message metering."""
