"""
Cross-cutting HTTP concerns: error handlers, security headers, rate
limiting and logging setup.
"""
