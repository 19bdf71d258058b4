"""
Abstract interfaces for the CMS Agent system.

These interfaces define the contracts that concrete implementations
must adhere to, following the Dependency Inversion Principle.

This package contains:
- Plugin interfaces for tools, registries and plugins
- Provider interfaces for the agent, record storage and messaging
- Service interfaces for the pre-save hook
"""
