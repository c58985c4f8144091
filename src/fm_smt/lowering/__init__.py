"""
Feature Model to SMT Lowering
=============================

Structure, cardinality, constraint and expression encoders.
"""

from .cardinality import CardinalityEncoder, encode_cardinality
from .constraints import ConstraintEncoder
from .context import ConversionContext
from .converter import ConversionResult, FeatureModelConverter, convert_feature_model
from .expressions import ExpressionEncoder
from .structure import StructureEncoder

__all__ = [
    'CardinalityEncoder',
    'ConstraintEncoder',
    'ConversionContext',
    'ConversionResult',
    'ExpressionEncoder',
    'FeatureModelConverter',
    'StructureEncoder',
    'convert_feature_model',
    'encode_cardinality',
]
