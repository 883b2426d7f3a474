"""Checkout bounded context: cars, payment methods and orders."""
