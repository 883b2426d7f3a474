"""
Deposit, withdrawal and loan requests and their admin review.
"""
