"""Pydantic models for compiled normalization AST documents.

A compiler emits the selection tree as JSON with ``kind`` tagged nodes and
camelCase keys. These models validate that document and convert it into the
domain dataclasses in ``graphnorm.domain.ast``.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from graphnorm.domain.ast import (
    Argument,
    Condition,
    Defer,
    FieldHandle,
    InlineFragment,
    LinkedField,
    MatchCase,
    MatchField,
    Operation,
    ScalarField,
    Selection,
    Stream,
    Variable,
)

if TYPE_CHECKING:
    from pathlib import Path


class AstDocumentError(ValueError):
    """Raised when a compiled AST document cannot be loaded."""


class AstBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)


class LiteralArgumentModel(AstBaseModel):
    kind: Literal["Literal"]
    name: str
    value: Any = None


class VariableArgumentModel(AstBaseModel):
    kind: Literal["Variable"]
    name: str
    variable_name: str = Field(alias="variableName")


ArgumentModel = Annotated[
    LiteralArgumentModel | VariableArgumentModel, Field(discriminator="kind")
]


class HandleModel(AstBaseModel):
    handle: str
    key: str = ""
    filters: list[str] | None = None


class ScalarFieldModel(AstBaseModel):
    kind: Literal["ScalarField"]
    name: str
    alias: str | None = None
    args: list[ArgumentModel] = Field(default_factory=list["ArgumentModel"])
    storage_key: str | None = Field(default=None, alias="storageKey")
    handles: list[HandleModel] = Field(default_factory=list["HandleModel"])


class LinkedFieldModel(AstBaseModel):
    kind: Literal["LinkedField"]
    name: str
    alias: str | None = None
    args: list[ArgumentModel] = Field(default_factory=list["ArgumentModel"])
    storage_key: str | None = Field(default=None, alias="storageKey")
    concrete_type: str | None = Field(default=None, alias="concreteType")
    plural: bool = False
    selections: list[SelectionModel] = Field(default_factory=list["SelectionModel"])
    handles: list[HandleModel] = Field(default_factory=list["HandleModel"])


class InlineFragmentModel(AstBaseModel):
    kind: Literal["InlineFragment"]
    type: str
    abstract: bool = False
    selections: list[SelectionModel] = Field(default_factory=list["SelectionModel"])


class MatchCaseModel(AstBaseModel):
    fragment_name: str = Field(alias="fragmentName")
    module_name: str = Field(alias="moduleName")
    operation_reference: str = Field(alias="operationReference")


class MatchFieldModel(AstBaseModel):
    kind: Literal["MatchField"]
    name: str
    alias: str | None = None
    storage_key: str | None = Field(default=None, alias="storageKey")
    matches_by_type: dict[str, MatchCaseModel] = Field(
        default_factory=dict["str", MatchCaseModel], alias="matchesByType"
    )


class DeferModel(AstBaseModel):
    kind: Literal["Defer"]
    label: str
    if_: bool | str | None = Field(default=None, alias="if")
    selections: list[SelectionModel] = Field(default_factory=list["SelectionModel"])


class StreamModel(AstBaseModel):
    kind: Literal["Stream"]
    label: str
    if_: bool | str | None = Field(default=None, alias="if")
    selections: list[SelectionModel] = Field(default_factory=list["SelectionModel"])


SelectionModel = Annotated[
    ScalarFieldModel
    | LinkedFieldModel
    | InlineFragmentModel
    | MatchFieldModel
    | DeferModel
    | StreamModel,
    Field(discriminator="kind"),
]


class OperationModel(AstBaseModel):
    kind: Literal["Operation"] = "Operation"
    name: str
    selections: list[SelectionModel] = Field(default_factory=list["SelectionModel"])


def load_operation(document: object) -> Operation:
    """Validate a decoded AST document and convert it to domain nodes."""

    try:
        model = OperationModel.model_validate(document)
    except ValidationError as exc:
        raise AstDocumentError(f"Invalid normalization AST document: {exc}") from exc
    return Operation(name=model.name, selections=_selections(model.selections))


def load_operation_file(path: Path) -> Operation:
    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise AstDocumentError(f"Cannot read AST document {path}: {exc}") from exc
    return load_operation(document)


def _selections(models: list[SelectionModel]) -> tuple[Selection, ...]:
    return tuple(_selection(model) for model in models)


def _selection(model: SelectionModel) -> Selection:
    match model:
        case ScalarFieldModel():
            return ScalarField(
                name=model.name,
                alias=model.alias,
                args=_arguments(model.args),
                storage_key=model.storage_key,
                handles=_handles(model.handles),
            )
        case LinkedFieldModel():
            return LinkedField(
                name=model.name,
                alias=model.alias,
                args=_arguments(model.args),
                storage_key=model.storage_key,
                concrete_type=model.concrete_type,
                plural=model.plural,
                selections=_selections(model.selections),
                handles=_handles(model.handles),
            )
        case InlineFragmentModel():
            return InlineFragment(
                type_condition=model.type,
                abstract=model.abstract,
                selections=_selections(model.selections),
            )
        case MatchFieldModel():
            return MatchField(
                name=model.name,
                alias=model.alias,
                storage_key=model.storage_key,
                cases=tuple(
                    MatchCase(
                        type_name=type_name,
                        fragment_name=case.fragment_name,
                        module_name=case.module_name,
                        operation_reference=case.operation_reference,
                    )
                    for type_name, case in model.matches_by_type.items()
                ),
            )
        case DeferModel():
            return Defer(
                label=model.label,
                condition=_condition(model.if_),
                selections=_selections(model.selections),
            )
        case StreamModel():
            return Stream(
                label=model.label,
                condition=_condition(model.if_),
                selections=_selections(model.selections),
            )


def _arguments(models: list[ArgumentModel]) -> tuple[Argument, ...]:
    arguments: list[Argument] = []
    for model in models:
        if isinstance(model, VariableArgumentModel):
            arguments.append(Argument(model.name, Variable(model.variable_name)))
        else:
            arguments.append(Argument(model.name, model.value))
    return tuple(arguments)


def _handles(models: list[HandleModel]) -> tuple[FieldHandle, ...]:
    return tuple(
        FieldHandle(
            handle=model.handle,
            key=model.key,
            filters=tuple(model.filters) if model.filters is not None else None,
        )
        for model in models
    )


def _condition(value: bool | str | None) -> Condition:
    # a compiled condition is either a literal or the name of a variable
    if value is None:
        return True
    if isinstance(value, bool):
        return value
    return Variable(value)


LinkedFieldModel.model_rebuild()
InlineFragmentModel.model_rebuild()
DeferModel.model_rebuild()
StreamModel.model_rebuild()
OperationModel.model_rebuild()
