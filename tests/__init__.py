"""
Remotestate Test Suite

Unit tests run against an in-memory fake of the Azure management plane
(see conftest.py); no Azure subscription is needed.
"""
