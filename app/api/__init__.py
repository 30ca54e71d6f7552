"""
HTTP routers
"""
