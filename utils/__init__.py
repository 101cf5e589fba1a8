"""
Utilities for the Banker's Safety Checker: input parsing, reporting and logging.
"""
