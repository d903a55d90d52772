"""HTTP routers grouped by audience."""
