# backend/modules/loyalty/__init__.py

"""
Loyalty points ledger, rewards redemption and challenges.
"""
