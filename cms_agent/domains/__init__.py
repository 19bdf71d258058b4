"""
Domain models for the CMS Agent system.

This package contains the core value types: tool schemas and results,
records and references, agent profiles, and the error taxonomy.
"""

from cms_agent.domains.agents import *
from cms_agent.domains.errors import *
from cms_agent.domains.records import *
from cms_agent.domains.tools import *
