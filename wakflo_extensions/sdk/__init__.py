"""
Connector SDK.

The plugin contract shared by every integration: metadata and auth
schemas, form schemas with dynamic options, invocation contexts, the
Action/Trigger base classes, the shared HTTP client and the registry.
"""

from .action import Action, ActionMetadata, Trigger, TriggerMetadata, TriggerType
from .auth import AuthContext, AuthSchema, AuthStrategy
from .context import DynamicFieldContext, ExecuteContext, InvocationContext, PerformContext
from .errors import (
    AuthError,
    ConnectorError,
    DecodeError,
    InputValidationError,
    RateLimitError,
    RemoteAPIError,
    RemoteAuthenticationError,
    RemoteNotFoundError,
    RemoteValidationError,
    TransportError,
)
from .forms import DynamicOptions, FieldType, FormBuilder, FormField, FormSchema, Option
from .http import ConnectorClient, decode_body
from .inputs import Blankable, RequiredStr, StepInput, parse_input
from .integration import Integration, IntegrationMetadata
from .polling import filter_since, parse_timestamp
from .registry import IntegrationRegistry, RegistryError
from .types import JSON

__all__ = [
    # Contracts
    "Action",
    "ActionMetadata",
    "Trigger",
    "TriggerMetadata",
    "TriggerType",
    "Integration",
    "IntegrationMetadata",
    # Auth
    "AuthContext",
    "AuthSchema",
    "AuthStrategy",
    # Contexts
    "InvocationContext",
    "PerformContext",
    "ExecuteContext",
    "DynamicFieldContext",
    # Forms
    "FieldType",
    "FormBuilder",
    "FormField",
    "FormSchema",
    "DynamicOptions",
    "Option",
    # Inputs
    "StepInput",
    "RequiredStr",
    "Blankable",
    "parse_input",
    # HTTP
    "ConnectorClient",
    "decode_body",
    # Polling
    "filter_since",
    "parse_timestamp",
    # Registry
    "IntegrationRegistry",
    "RegistryError",
    # Errors
    "ConnectorError",
    "InputValidationError",
    "AuthError",
    "TransportError",
    "DecodeError",
    "RemoteAPIError",
    "RemoteAuthenticationError",
    "RemoteNotFoundError",
    "RateLimitError",
    "RemoteValidationError",
    # Types
    "JSON",
]
