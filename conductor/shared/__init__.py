"""
CONDUCTOR Shared — Settings, errors, logging and utilities.
"""
