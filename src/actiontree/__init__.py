"""actiontree - hierarchical action outline engine."""
