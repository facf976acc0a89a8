"""
Shared service utilities.

- http.py - ``requests`` session with bounded retry/backoff and default timeout
"""
