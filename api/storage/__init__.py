"""MongoDB storage layer: connection, collection variants and provisioning."""
