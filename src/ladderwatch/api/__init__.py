"""HTTP routes over the ladder cache and the tracked-club registry."""
