"""
Wakflo Extensions - connector plugins for the Wakflo workflow-automation platform.

Each integration exposes actions (one-shot API calls run by a workflow
step) and polling triggers (checks for new or changed remote data) behind
one async plugin contract:

- **SDK**: Metadata, auth and form schemas, invocation contexts, the shared
  HTTP client and the integration registry
- **Integrations**: Google Sheets, Mailchimp, Telegram, Discord, Freshdesk,
  Campaign Monitor, Ghost CMS, Jira Cloud, HubSpot, Todoist, Pinterest and
  Zoho CRM

Quick Start:
    >>> from wakflo_extensions import PerformContext, AuthContext, default_registry
    >>>
    >>> action = default_registry().find_action("todoist", "create_task")
    >>> ctx = PerformContext(input={"content": "Buy milk"}, auth=AuthContext(access_token="..."))
    >>> task = await action.perform(ctx)
"""

__version__ = "0.1.0"

from wakflo_extensions.config import ConnectorSettings, configure_logging, get_settings
from wakflo_extensions.integrations import ALL_INTEGRATIONS, default_registry
from wakflo_extensions.sdk import (
    AuthContext,
    ConnectorError,
    DynamicFieldContext,
    ExecuteContext,
    IntegrationRegistry,
    PerformContext,
)

__all__ = [
    # Version info
    "__version__",
    # Registry
    "ALL_INTEGRATIONS",
    "IntegrationRegistry",
    "default_registry",
    # Contexts
    "AuthContext",
    "PerformContext",
    "ExecuteContext",
    "DynamicFieldContext",
    # Configuration
    "ConnectorSettings",
    "configure_logging",
    "get_settings",
    # Errors
    "ConnectorError",
]
