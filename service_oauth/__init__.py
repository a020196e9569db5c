"""
OAuth credential core for the access layer.
"""
