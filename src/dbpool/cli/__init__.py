"""dbpool command line interface."""
