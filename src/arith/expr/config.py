"""
Configuration for expression limits.

Limits can come from a dict (snake_case or camelCase keys), from an
ExpressionLimitsConfig model, or from ARITH_EXPR_* environment variables.
"""

from __future__ import annotations

import os
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from .limits import DEFAULT_EXPRESSION_LIMITS, ExpressionLimits

ENV_VAR_MAX_EXPRESSION_LENGTH = "ARITH_EXPR_MAX_EXPRESSION_LENGTH"
ENV_VAR_MAX_AST_DEPTH = "ARITH_EXPR_MAX_AST_DEPTH"
ENV_VAR_MAX_AST_NODES = "ARITH_EXPR_MAX_AST_NODES"
ENV_VAR_MAX_FUNCTION_ARGS = "ARITH_EXPR_MAX_FUNCTION_ARGS"
ENV_VAR_MAX_NESTING_DEPTH = "ARITH_EXPR_MAX_NESTING_DEPTH"


class ExpressionLimitsConfig(BaseModel):
    """Configuration model for ExpressionLimits."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    max_expression_length: int = Field(
        default=DEFAULT_EXPRESSION_LIMITS.max_expression_length,
        gt=0,
        alias="maxExpressionLength",
    )

    max_ast_depth: int = Field(
        default=DEFAULT_EXPRESSION_LIMITS.max_ast_depth,
        gt=0,
        alias="maxAstDepth",
    )

    max_ast_nodes: int = Field(
        default=DEFAULT_EXPRESSION_LIMITS.max_ast_nodes,
        gt=0,
        alias="maxAstNodes",
    )

    max_function_args: int = Field(
        default=DEFAULT_EXPRESSION_LIMITS.max_function_args,
        gt=0,
        alias="maxFunctionArgs",
    )

    max_nesting_depth: int = Field(
        default=DEFAULT_EXPRESSION_LIMITS.max_nesting_depth,
        gt=0,
        alias="maxNestingDepth",
    )

    def to_limits(self) -> ExpressionLimits:
        """Builds the frozen limits used by the parser."""
        return ExpressionLimits(**self.model_dump(by_alias=False))


def load_limits(
    config: ExpressionLimitsConfig | ExpressionLimits | Mapping[str, Any] | None,
) -> ExpressionLimits:
    """
    Normalizes limits configuration.

    Args:
        config: None (defaults), a dict, a config model or ready-made limits

    Returns:
        The expression limits

    Raises:
        pydantic.ValidationError: If a dict holds unknown keys or bad values
    """
    if config is None:
        return DEFAULT_EXPRESSION_LIMITS

    if isinstance(config, ExpressionLimits):
        return config

    if isinstance(config, ExpressionLimitsConfig):
        return config.to_limits()

    return ExpressionLimitsConfig.model_validate(dict(config)).to_limits()


def limits_from_env(environ: Optional[Mapping[str, str]] = None) -> ExpressionLimits:
    """
    Reads limits from ARITH_EXPR_* environment variables.

    Unset variables keep their default values.
    """
    environ = os.environ if environ is None else environ

    env_fields = {
        "max_expression_length": ENV_VAR_MAX_EXPRESSION_LENGTH,
        "max_ast_depth": ENV_VAR_MAX_AST_DEPTH,
        "max_ast_nodes": ENV_VAR_MAX_AST_NODES,
        "max_function_args": ENV_VAR_MAX_FUNCTION_ARGS,
        "max_nesting_depth": ENV_VAR_MAX_NESTING_DEPTH,
    }

    values = {
        field_name: environ[env_var]
        for field_name, env_var in env_fields.items()
        if environ.get(env_var)
    }
    return load_limits(values)
