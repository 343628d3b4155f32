"""Hook definitions and command extraction.

A hook pairs a trigger rule with instructions for building the command line
and environment of the program it runs. Hooks are loaded once from a JSON or
YAML file and shared read-only between requests.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, RootModel, ValidationError

from hookfire.arguments import ENV_NAMESPACE, Argument, ArgumentSource
from hookfire.errors import ArgumentError, HookConfigError, ParseError, SourceError
from hookfire.parameters import decode_json, replace_parameter
from hookfire.request import Request
from hookfire.rules import Rules, evaluate

logger = logging.getLogger(__name__)


class ResponseHeader(BaseModel):
    """A header added to the HTTP response of a hook."""

    model_config = ConfigDict(frozen=True)

    name: str
    value: str


class ResponseHeaders(RootModel[tuple[ResponseHeader, ...]]):
    """Ordered, immutable sequence of response headers."""

    model_config = ConfigDict(frozen=True)

    root: tuple[ResponseHeader, ...] = ()

    def __iter__(self) -> Iterator[ResponseHeader]:  # type: ignore[override]
        return iter(self.root)

    def __len__(self) -> int:
        return len(self.root)

    def __str__(self) -> str:
        # Shown as the flag placeholder when nothing is set
        if not self.root:
            return "name=value"
        return ", ".join(f"{header.name}={header.value}" for header in self.root)

    def set(self, value: str) -> ResponseHeaders:
        """Return a copy with a header from ``name=value`` notation appended.

        Raises:
            ValueError: If ``value`` contains no ``=``
        """
        name, sep, header_value = value.partition("=")
        if not sep:
            raise ValueError("header flag must be in name=value format")
        return ResponseHeaders((*self.root, ResponseHeader(name=name, value=header_value)))

    def __add__(self, other: ResponseHeaders) -> ResponseHeaders:
        return ResponseHeaders((*self.root, *other.root))


class CommandStatusResponse(BaseModel):
    """Result of running a hook command, as reported by the executor."""

    message: str = ""
    output: str = ""
    error: str = ""

    def to_json(self) -> str:
        """Serialize, leaving out empty fields."""
        return self.model_dump_json(exclude_defaults=True)


@dataclass
class HookInvocation:
    """Everything the executor needs to run a fired hook.

    Attributes:
        hook_id: ID of the hook that fired
        argv: Command followed by its arguments
        env: ``NAME=value`` entries to add to the environment
        working_directory: Directory to run in, None for the current one
    """

    hook_id: str
    argv: list[str]
    env: list[str] = field(default_factory=list)
    working_directory: str | None = None


class Hook(BaseModel):
    """A single hook definition.

    Field aliases are the hyphenated keys used in hook files.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    id: str = ""
    execute_command: str = Field(default="", alias="execute-command")
    command_working_directory: str = Field(default="", alias="command-working-directory")
    response_message: str = Field(default="", alias="response-message")
    response_headers: ResponseHeaders = Field(default_factory=ResponseHeaders, alias="response-headers")
    capture_command_output: bool = Field(default=False, alias="include-command-output-in-response")
    pass_environment_to_command: tuple[Argument, ...] = Field(default=(), alias="pass-environment-to-command")
    pass_arguments_to_command: tuple[Argument, ...] = Field(default=(), alias="pass-arguments-to-command")
    json_string_parameters: tuple[Argument, ...] = Field(default=(), alias="parse-parameters-as-json")
    trigger_rule: Rules | None = Field(default=None, alias="trigger-rule")

    def parse_json_parameters(self, request: Request) -> None:
        """Decode JSON string arguments and splice the objects back in place.

        Each argument in ``parse-parameters-as-json`` is resolved, decoded as
        a JSON object and written over the original string in the tree it
        came from. Paths that do not already exist are left untouched.

        Args:
            request: Request whose trees are modified in place

        Raises:
            ArgumentError: If an argument cannot be resolved
            ParseError: If the value is not a JSON object
            SourceError: If the argument source is not header, url or payload
        """
        for argument in self.json_string_parameters:
            arg, ok = argument.get(request.headers, request.query, request.payload)
            if not ok:
                raise ArgumentError(argument)

            try:
                decoded = decode_json(arg)
            except json.JSONDecodeError as e:
                raise ParseError(str(e)) from e
            if not isinstance(decoded, dict):
                raise ParseError(f"expected a JSON object for {argument.name!r}, got {type(decoded).__name__}")

            sources: dict[ArgumentSource, dict[str, Any]] = {
                ArgumentSource.HEADER: request.headers,
                ArgumentSource.QUERY: request.query,
                ArgumentSource.PAYLOAD: request.payload,
            }
            source = sources.get(argument.source)
            if source is None:
                raise SourceError(argument)

            if replace_parameter(argument.name, source, decoded):
                logger.debug("Hook %s: parsed %s.%s as JSON", self.id, argument.source.value, argument.name)
            else:
                logger.debug("Hook %s: no existing %s.%s to replace", self.id, argument.source.value, argument.name)

    def extract_command_arguments(self, request: Request) -> list[str]:
        """Build the command line for this hook.

        Returns:
            ``[execute-command, arg1, arg2, ...]``

        Raises:
            ArgumentError: On the first unresolved argument. ``partial`` holds
                the list built so far with an empty placeholder appended.
        """
        args = [self.execute_command]

        for argument in self.pass_arguments_to_command:
            arg, ok = argument.get(request.headers, request.query, request.payload)
            if not ok:
                args.append("")
                raise ArgumentError(argument, partial=args)
            args.append(arg)

        return args

    def extract_command_arguments_for_env(self, request: Request, namespace: str = ENV_NAMESPACE) -> list[str]:
        """Build ``NAME=value`` environment entries for this hook.

        Args:
            request: Request to resolve arguments from
            namespace: Prefix for every variable name

        Raises:
            ArgumentError: On the first unresolved argument. ``partial`` holds
                the entries built before it.
        """
        env: list[str] = []

        for argument in self.pass_environment_to_command:
            arg, ok = argument.get(request.headers, request.query, request.payload)
            if not ok:
                raise ArgumentError(argument, partial=env)
            env.append(f"{namespace}{argument.name}={arg}")

        return env

    def evaluate_trigger(self, request: Request) -> bool:
        """Check whether this hook fires for ``request``."""
        return evaluate(self.trigger_rule, request)

    def prepare(self, request: Request, namespace: str = ENV_NAMESPACE) -> HookInvocation | None:
        """Run the whole decision for one request.

        Parses JSON parameters, evaluates the trigger rule and, if the hook
        fires, extracts the command line and environment.

        Returns:
            HookInvocation if the hook fires, None otherwise

        Raises:
            HookError: Any error from parsing, evaluation or extraction
        """
        self.parse_json_parameters(request)

        if not self.evaluate_trigger(request):
            logger.info("Hook %s matched, but its trigger rules were not satisfied", self.id)
            return None

        argv = self.extract_command_arguments(request)
        env = self.extract_command_arguments_for_env(request, namespace=namespace)
        logger.info("Hook %s triggered: %s", self.id, self.execute_command)

        return HookInvocation(
            hook_id=self.id,
            argv=argv,
            env=env,
            working_directory=self.command_working_directory or None,
        )


class Hooks(RootModel[list[Hook]]):
    """Ordered collection of hooks; file order decides lookup priority."""

    root: list[Hook] = Field(default_factory=list)

    def __iter__(self) -> Iterator[Hook]:  # type: ignore[override]
        return iter(self.root)

    def __len__(self) -> int:
        return len(self.root)

    def __getitem__(self, index: int) -> Hook:
        return self.root[index]

    def match(self, hook_id: str) -> Hook | None:
        """Return the first hook with ``hook_id``, or None."""
        for hook in self.root:
            if hook.id == hook_id:
                return hook
        return None

    def match_all(self, hook_id: str) -> list[Hook] | None:
        """Return every hook with ``hook_id`` in file order, or None."""
        matched = [hook for hook in self.root if hook.id == hook_id]
        return matched or None

    @classmethod
    def from_file(cls, path: Path | str | None) -> Hooks:
        """Load hooks from a JSON or YAML file.

        Files ending in ``.json`` are parsed as JSON, anything else as YAML.
        An empty path yields an empty collection.

        Raises:
            HookConfigError: If the file cannot be read or is invalid
        """
        if not path:
            return cls()

        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
            data = json.loads(text) if path.suffix.lower() == ".json" else yaml.safe_load(text)
        except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
            raise HookConfigError(f"couldn't load hooks from {path}: {e}") from e

        try:
            hooks = cls.model_validate(data or [])
        except ValidationError as e:
            raise HookConfigError(f"invalid hooks in {path}: {e}") from e

        logger.info("Loaded %d hook(s) from %s", len(hooks), path)
        return hooks
