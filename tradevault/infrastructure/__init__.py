"""
Adapters behind the domain ports: SQLAlchemy repositories and unit of
work, Finnhub and Cloudinary HTTP clients, bcrypt/JWT credentials, SMTP
and the notification worker.
"""
