"""Web adapter for the configurator."""
