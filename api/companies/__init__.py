"""
Company/Employee feature: SQL (`repository`), schemas and HTTP routes.
"""
