"""Domain core: entity graph, flashlists, matching, dispatch and derived values."""
