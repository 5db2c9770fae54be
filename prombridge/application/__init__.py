"""Application layer: ports and export services."""
