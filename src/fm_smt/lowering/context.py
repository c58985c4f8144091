from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from fm_smt.model.features import FeatureModel


@dataclass
class ConversionContext:
    """
    Per-conversion state threaded through the lowering.

    Attributes:
        model: The model being converted (read-only)
        average_dividers: attribute name -> divider-defining formulas, filled
            the first time avg(attribute) is lowered in this conversion
        inherited: attribute names whose dividers an earlier conversion
            already emitted; they are not emitted again
    """
    model: FeatureModel
    average_dividers: Dict[str, List[Any]] = field(default_factory=dict)
    inherited: frozenset = frozenset()

    def has_dividers(self, attribute: str) -> bool:
        return attribute in self.average_dividers or attribute in self.inherited

    def record_dividers(self, attribute: str, formulas: List[Any]) -> None:
        if self.has_dividers(attribute):
            return
        self.average_dividers[attribute] = list(formulas)

    def divider_formulas(self) -> List[Any]:
        return [f for formulas in self.average_dividers.values() for f in formulas]

    def child(self, model: Optional[FeatureModel] = None) -> "ConversionContext":
        """Fresh context that treats every divider known here as already emitted."""
        known = frozenset(self.average_dividers) | self.inherited
        return ConversionContext(model=model or self.model, inherited=known)
