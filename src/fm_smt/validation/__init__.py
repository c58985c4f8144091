from .model_integrity import ModelIntegrityChecker, ValidationResult, validate_model

__all__ = ['ModelIntegrityChecker', 'ValidationResult', 'validate_model']
