"""Domain modules built on the WPS kernel."""
