"""
Service implementations for the CMS Agent system.

These services implement agent management, the record save pipeline
and the pre-save hook.
"""
