"""Shared helpers with no dependency on the other layers."""
