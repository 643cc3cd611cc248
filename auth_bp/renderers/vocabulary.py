"""Target-language vocabulary for semantic types and validation rules.

Maps the language-independent catalog vocabulary onto TypeScript types,
class-validator/class-transformer decorators and Prisma column types.
"""

from __future__ import annotations

from ..errors import MalformedDefinition
from ..models import ColumnDefault, RuleKind, SemanticType, ValidationRule

CLASS_VALIDATOR = "class-validator"
CLASS_TRANSFORMER = "class-transformer"

# Auxiliary modules in the order their import lines are emitted.
DECORATOR_MODULES: tuple[str, ...] = (CLASS_VALIDATOR, CLASS_TRANSFORMER)

# RuleKind -> (decorator name, module providing it)
RULE_DECORATORS: dict[RuleKind, tuple[str, str]] = {
    RuleKind.STRING: ("IsString", CLASS_VALIDATOR),
    RuleKind.EMAIL: ("IsEmail", CLASS_VALIDATOR),
    RuleKind.STRONG_PASSWORD: ("IsStrongPassword", CLASS_VALIDATOR),
    RuleKind.MIN_LENGTH: ("MinLength", CLASS_VALIDATOR),
    RuleKind.MAX_LENGTH: ("MaxLength", CLASS_VALIDATOR),
    RuleKind.MATCHES: ("Matches", CLASS_VALIDATOR),
    RuleKind.UUID: ("IsUUID", CLASS_VALIDATOR),
    RuleKind.UUID_EACH: ("IsUUID", CLASS_VALIDATOR),
    RuleKind.ARRAY: ("IsArray", CLASS_VALIDATOR),
    RuleKind.BOOLEAN: ("IsBoolean", CLASS_VALIDATOR),
    RuleKind.ONE_OF: ("IsIn", CLASS_VALIDATOR),
    RuleKind.TO_BOOLEAN: ("Transform", CLASS_TRANSFORMER),
    RuleKind.DEFINED: ("IsDefined", CLASS_VALIDATOR),
    RuleKind.OPTIONAL: ("IsOptional", CLASS_VALIDATOR),
}

TYPESCRIPT_TYPES: dict[SemanticType, str] = {
    SemanticType.SHORT_TEXT: "string",
    SemanticType.EMAIL: "string",
    SemanticType.PASSWORD: "string",
    SemanticType.IDENTIFIER: "string",
    SemanticType.BOOLEAN: "boolean",
    SemanticType.TIMESTAMP: "Date",
    SemanticType.ENUMERATED: "string",
    SemanticType.IDENTIFIER_ARRAY: "string[]",
}

PRISMA_TYPES: dict[SemanticType, str] = {
    SemanticType.SHORT_TEXT: "String",
    SemanticType.EMAIL: "String",
    SemanticType.PASSWORD: "String",
    SemanticType.IDENTIFIER: "String",
    SemanticType.BOOLEAN: "Boolean",
    SemanticType.TIMESTAMP: "DateTime",
    SemanticType.ENUMERATED: "String",
    SemanticType.IDENTIFIER_ARRAY: "String[]",
}

PRISMA_DEFAULTS: dict[ColumnDefault, str] = {
    ColumnDefault.GENERATED_ID: "@id @default(uuid())",
    ColumnDefault.NOW: "@default(now())",
    ColumnDefault.UPDATED_AT: "@updatedAt",
    ColumnDefault.FALSE: "@default(false)",
}


def _quoted(values) -> str:
    return ", ".join(f"'{value}'" for value in values)


def decorator_name(rule: ValidationRule) -> str:
    return RULE_DECORATORS[rule.kind][0]


def decorator_module(rule: ValidationRule) -> str:
    return RULE_DECORATORS[rule.kind][1]


def decorator_call(rule: ValidationRule) -> str:
    """TypeScript decorator expression for *rule*, without the ``@``."""
    name = decorator_name(rule)
    kind, arg = rule.kind, rule.argument
    if kind in (RuleKind.MIN_LENGTH, RuleKind.MAX_LENGTH):
        return f"{name}({arg})"
    if kind is RuleKind.MATCHES:
        return f"{name}(/{arg}/)"
    if kind is RuleKind.UUID_EACH:
        return f"{name}('all', {{ each: true }})"
    if kind is RuleKind.ONE_OF:
        return f"{name}([{_quoted(arg)}])"
    if kind is RuleKind.TO_BOOLEAN:
        return f"{name}(({{ value }}) => value === true || value === 'true')"
    return f"{name}()"


def rule_label(rule: ValidationRule) -> str:
    """Short human-readable form used in documentation, e.g. ``MinLength(8)``."""
    name = decorator_name(rule)
    kind, arg = rule.kind, rule.argument
    if kind in (RuleKind.MIN_LENGTH, RuleKind.MAX_LENGTH):
        return f"{name}({arg})"
    if kind is RuleKind.MATCHES:
        return f"{name}(/{arg}/)"
    if kind is RuleKind.UUID_EACH:
        return f"{name}(each)"
    if kind is RuleKind.ONE_OF:
        return f"{name}({'|'.join(arg)})"
    if kind is RuleKind.TO_BOOLEAN:
        return f"{name}(toBoolean)"
    return name


def check_argument(artifact: str, rule: ValidationRule) -> None:
    """Reject rules whose argument does not fit their kind.

    Raises:
        MalformedDefinition: On a missing or mistyped argument.
    """
    kind, arg = rule.kind, rule.argument
    if kind in (RuleKind.MIN_LENGTH, RuleKind.MAX_LENGTH):
        ok = isinstance(arg, int) and arg >= 0
    elif kind is RuleKind.MATCHES:
        ok = isinstance(arg, str) and bool(arg)
    elif kind is RuleKind.ONE_OF:
        ok = isinstance(arg, tuple) and bool(arg)
    else:
        ok = arg is None
    if not ok:
        raise MalformedDefinition(
            artifact, f"rule {kind.value!r} has invalid argument {arg!r}"
        )
