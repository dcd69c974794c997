"""
API package: the route dispatcher and the FastAPI routers exposing it.
"""
