"""
Exceptions raised by the order cost policy engine.

Authoring-time problems surface as ``ValidationError`` with per-field detail.
Evaluation-time problems are ``EvaluationError`` subclasses; they are terminal
for the evaluation and carry the ids of the rules involved.
"""
from typing import Dict, Iterable, List, Optional


class PricingError(Exception):
    """Base exception for pricing engine errors"""
    pass


class ValidationError(PricingError):
    """Raised when a rule definition fails validation"""

    def __init__(self, errors: Dict[str, List[str]], message: str = "Validation failed"):
        super().__init__(message)
        self.errors = errors


class ConditionError(PricingError):
    """Raised when a conditions expression cannot be parsed"""

    def __init__(self, message: str, path: str = "$"):
        super().__init__(f"{path}: {message}")
        self.path = path


class EvaluationError(PricingError):
    """Base for errors that abort an evaluation"""

    code = "evaluation_error"

    def __init__(self, message: str, rule_ids: Optional[Iterable[int]] = None):
        super().__init__(message)
        self.rule_ids = sorted(rule_ids or [])

    def as_dict(self) -> Dict:
        return {"detail": str(self), "code": self.code, "rule_ids": self.rule_ids}


class ConflictingMandatoryRules(EvaluationError):
    """More than one mandatory insurance plan is eligible at the same time"""

    code = "conflicting_mandatory_rules"


class UnresolvedInsuranceSelection(EvaluationError):
    """Several optional plans are eligible and the caller selected none"""

    code = "unresolved_insurance_selection"


class IneligibleInsuranceSelection(EvaluationError):
    """The caller selected a plan that is not eligible for the order"""

    code = "ineligible_insurance_selection"


class MissingRequiredField(EvaluationError):
    """A type-dependent field is absent on a stored rule"""

    code = "missing_required_field"

    def __init__(self, rule_id: Optional[int], field: str):
        super().__init__(f"Rule {rule_id} is missing required field '{field}'", [rule_id] if rule_id is not None else [])
        self.field = field
