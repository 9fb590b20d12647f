"""Cache orchestration, persistence bridge, refresh scheduling and search debounce."""
