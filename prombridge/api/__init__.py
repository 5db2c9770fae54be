"""HTTP surface of the pull path."""
