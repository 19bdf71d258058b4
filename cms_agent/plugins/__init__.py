"""
Plugin system for the CMS Agent.

This package provides plugin management, tool registration, and plugin discovery
mechanisms that expose function-call tools to agents.
"""
