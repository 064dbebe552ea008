"""Outbound tracker connectors."""
