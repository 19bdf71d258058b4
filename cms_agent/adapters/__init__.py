"""
Adapters for external systems and services.

These adapters implement the interfaces defined in cms_agent.interfaces
and provide concrete implementations for the chat provider, record
storage, vocabularies and user notices.
"""
