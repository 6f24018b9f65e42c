"""Operand generation namespace."""

from .operands import OPERAND_HIGH, OPERAND_LOW, generate_operands

__all__ = ["OPERAND_HIGH", "OPERAND_LOW", "generate_operands"]
