"""
Registration, login, profiles, admin user management and KYC.
"""
