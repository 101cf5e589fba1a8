"""
Models package for the Banker's Safety Checker.
Contains the parsed input description and the ResourceState.
"""
