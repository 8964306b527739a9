"""Session orchestration, events, tracing, and the command line."""
