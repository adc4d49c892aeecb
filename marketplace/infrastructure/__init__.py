"""
Infrastructure package.

Database models and repositories, payment providers, and monitoring.
"""
