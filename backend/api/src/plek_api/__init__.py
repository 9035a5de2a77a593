"""REST API for the Plek booking platform."""
