"""
Core helpers for the SynapseFI client.

This package holds the pieces every request goes through: settings,
session state, header building, error classification and the single
re-authentication retry.  Keeping them together makes it easy to test
them without any resource facade.
"""
