"""
ResumeHub

Multi-tenant resume management: tenant resolution by host, owner-only
resume access, and asynchronous analysis notifications.
"""

__version__ = "1.0.0"
