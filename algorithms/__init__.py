"""
Algorithms package for the Banker's Safety Checker.
Contains the safety algorithm and request evaluation.
"""
