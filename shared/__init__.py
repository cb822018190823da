"""
Shared Kernel

Cross-cutting infrastructure used by every app: the API exception handler
and the request logging middleware.
"""
