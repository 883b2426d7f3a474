"""
Stock and plan trades, wallet operations, holdings queries, portfolio
valuation and investment plan administration.
"""
