"""Tool catalog: declarative tool table, argument schemas and validation."""

from __future__ import annotations

import inspect
import logging
import types
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from types import FunctionType
from typing import Any, Literal, TypeVar, get_args, get_origin, get_type_hints

from pydantic import BaseModel, ConfigDict, ValidationError, create_model

from cli_bridge.errors import InvalidArguments, UnknownTool

log = logging.getLogger(__name__)

F = TypeVar("F", bound=FunctionType)


@dataclass(frozen=True)
class ToolSpec:
    """A tool a bridge exposes to its callers.

    ``heading`` is the Markdown label put in front of the program's output;
    it is formatted with the validated arguments, so it can echo them back.
    """

    name: str
    description: str
    input_schema: dict[str, Any]
    heading: str
    builder: Callable[..., str]
    arguments_model: type[BaseModel]

    def validate(self, arguments: Mapping[str, Any] | None) -> dict[str, Any]:
        """Check raw arguments against the schema, returning the validated set."""
        try:
            model = self.arguments_model.model_validate(dict(arguments or {}))
        except ValidationError as e:
            raise InvalidArguments(self.name, _violations(e)) from None
        return model.model_dump()

    def build_prompt(self, arguments: Mapping[str, Any]) -> str:
        return self.builder(**arguments)

    def format_response(self, arguments: Mapping[str, Any], output: str) -> str:
        return f"{self.heading.format(**arguments)}\n\n{output}"


class ToolCatalog:
    """The static, ordered tool table of one bridge."""

    def __init__(self) -> None:
        self._tools: dict[str, ToolSpec] = {}

    def tool(self, *, heading: str) -> Callable[[F], F]:
        """Decorator that registers a prompt builder as a tool.

        The tool's name is the function name, its description the first
        paragraph of the docstring, and its argument schema is derived from
        the keyword-only parameters and their ``name: description`` lines.
        """

        def _register(fn: F) -> F:
            name = fn.__name__
            if name in self._tools:
                raise ValueError(f"Tool {name!r} is already registered")
            schema, model = _schema_from_hints(fn)
            self._tools[name] = ToolSpec(
                name=name,
                description=_summary(fn.__doc__ or ""),
                input_schema=schema,
                heading=heading,
                builder=fn,
                arguments_model=model,
            )
            return fn

        return _register

    def definitions(self) -> list[ToolSpec]:
        """Return tool definitions in declaration order."""
        return list(self._tools.values())

    def get(self, name: str) -> ToolSpec:
        spec = self._tools.get(name)
        if spec is None:
            raise UnknownTool(name)
        return spec

    def build_prompt(self, name: str, arguments: Mapping[str, Any]) -> str:
        """Validate ``arguments`` for tool ``name`` and render its prompt."""
        spec = self.get(name)
        return spec.build_prompt(spec.validate(arguments))


TYPE_MAP = {
    str: "string",
    int: "integer",
    bool: "boolean",
    float: "number",
}


def _schema_from_hints(fn: Callable) -> tuple[dict[str, Any], type[BaseModel]]:
    """Derive a JSON schema and a strict pydantic model from a function signature."""
    hints = get_type_hints(fn)
    sig = inspect.signature(fn)
    param_descriptions = _parse_param_docs(fn.__doc__ or "")

    properties: dict[str, Any] = {}
    required: list[str] = []
    fields: dict[str, Any] = {}

    for param_name, param in sig.parameters.items():
        hint = hints.get(param_name, str)
        fields[param_name] = (
            hint,
            ... if param.default is inspect.Parameter.empty else param.default,
        )

        # Unwrap Optional / X | None to the inner type
        if get_origin(hint) is types.UnionType:
            hint = next(a for a in get_args(hint) if a is not type(None))
        prop: dict[str, Any]
        if get_origin(hint) is Literal:
            choices = list(get_args(hint))
            prop = {"type": TYPE_MAP.get(type(choices[0]), "string"), "enum": choices}
        else:
            prop = {"type": TYPE_MAP.get(hint, "string")}

        if param_name in param_descriptions:
            prop["description"] = param_descriptions[param_name]

        if param.default is inspect.Parameter.empty:
            required.append(param_name)
        elif param.default is not None:
            prop["default"] = param.default

        properties[param_name] = prop

    schema: dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        schema["required"] = required
    schema["additionalProperties"] = False

    model = create_model(
        f"{fn.__name__}_arguments",
        __config__=ConfigDict(strict=True, extra="forbid"),
        **fields,
    )
    return schema, model


def _summary(docstring: str) -> str:
    """The first paragraph of a docstring, as one line."""
    first, _, _ = inspect.cleandoc(docstring).partition("\n\n")
    return " ".join(line.strip() for line in first.splitlines())


def _parse_param_docs(docstring: str) -> dict[str, str]:
    """Parse 'param_name: description' lines from a docstring."""
    descriptions = {}
    for line in docstring.split("\n")[1:]:
        line = line.strip()
        if ":" in line and not line.startswith("#"):
            name, _, desc = line.partition(":")
            name = name.strip()
            desc = desc.strip()
            if name.isidentifier() and desc:
                descriptions[name] = desc
        elif line.startswith("---"):
            break
    return descriptions


def _violations(error: ValidationError) -> list[str]:
    violations = []
    for err in error.errors():
        field = ".".join(str(part) for part in err["loc"]) or "arguments"
        violations.append(f"{field}: {err['msg']}")
    return violations
