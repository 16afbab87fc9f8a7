"""Inventory and sales chat assistant with durable conversation threads."""

__version__ = "0.1.0"
