"""
OSBAPI Broker

A library for exposing Open Service Broker API endpoints: catalog, service
instance and service binding lifecycle, with event flows around each operation.
"""

__version__ = "0.1.0"
