"""Accounts bounded context: users, credentials, principals and KYC."""
