"""
Feature modules (verification, submissions).
"""
