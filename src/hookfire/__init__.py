"""Webhook trigger rule evaluation and command argument extraction.

Decides whether a hook fires for an incoming request and resolves the
command line and environment it should run with:

    hooks = Hooks.from_file("hooks.json")
    hook = hooks.match("redeploy")
    request = Request.from_raw(headers, query_string, body)
    invocation = hook.prepare(request)   # None if the trigger rule fails
"""

from hookfire.arguments import ENV_NAMESPACE, Argument, ArgumentSource
from hookfire.errors import (
    ArgumentError,
    HookConfigError,
    HookError,
    ParseError,
    PatternError,
    SignatureError,
    SourceError,
)
from hookfire.hook import CommandStatusResponse, Hook, HookInvocation, Hooks, ResponseHeader, ResponseHeaders
from hookfire.parameters import JSONNumber, extract_parameter_as_string, get_parameter, replace_parameter
from hookfire.request import Request
from hookfire.rules import MatchRule, MatchType, Rules, evaluate
from hookfire.signature import check_payload_signature

__all__ = [
    "ENV_NAMESPACE",
    "Argument",
    "ArgumentError",
    "ArgumentSource",
    "CommandStatusResponse",
    "Hook",
    "HookConfigError",
    "HookError",
    "HookInvocation",
    "Hooks",
    "JSONNumber",
    "MatchRule",
    "MatchType",
    "ParseError",
    "PatternError",
    "Request",
    "ResponseHeader",
    "ResponseHeaders",
    "Rules",
    "SignatureError",
    "SourceError",
    "check_payload_signature",
    "evaluate",
    "extract_parameter_as_string",
    "get_parameter",
    "replace_parameter",
]
