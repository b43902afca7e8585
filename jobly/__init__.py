"""Jobly: data access for companies and jobs."""

__version__ = "0.1.0"
