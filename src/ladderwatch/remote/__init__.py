"""Remote API access: the fetch client and its error taxonomy."""
