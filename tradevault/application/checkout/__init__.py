"""
Car catalog, payment methods and the order payment lifecycle.
"""
