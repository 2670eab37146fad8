"""Shared service-layer building blocks: errors, ports, deadlines and the base service."""
