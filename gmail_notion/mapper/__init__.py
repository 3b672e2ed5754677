"""Gmail source field catalog and stored mapping entries."""
