"""Streamlit admin console for a multi-tenant shop inventory API."""

__version__ = "0.1.0"
