"""Smart Travel Planner - personalised, schema-validated travel plans."""

__version__ = "1.0.0"
