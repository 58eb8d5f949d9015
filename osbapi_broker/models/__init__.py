"""Open Service Broker API data models."""
