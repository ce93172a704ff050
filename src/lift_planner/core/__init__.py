"""Program engine, models and catalog."""
