"""
Service layer for burial records
"""
