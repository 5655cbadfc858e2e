"""Application bootstrap: early setup, application factory, process hooks."""
