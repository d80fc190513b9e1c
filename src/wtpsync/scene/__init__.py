"""Scene-facing layer: component catalog, node bindings and the per-frame resolver."""
