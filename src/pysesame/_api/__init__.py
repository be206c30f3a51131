"""Endpoint functions for the Sesame web API."""
