"""Configuration: settings, datastore, cross-origin policies, error tracking."""
