# backend/app/domain/legal_sections.py
from __future__ import annotations

import json
from typing import Any, Optional

from pydantic import BaseModel, ValidationError

from ..schemas import (
    ComplianceStatusSection,
    CurrentOwnershipSection,
    LitigationHistorySection,
    StatutoryApprovalsSection,
    TaxComplianceSection,
    TitleVerificationSection,
)

# section name -> (model column holding JSON text, typed section model)
SECTIONS: dict[str, tuple[str, type[BaseModel]]] = {
    "current_ownership": ("current_ownership_json", CurrentOwnershipSection),
    "title_verification": ("title_verification_json", TitleVerificationSection),
    "statutory_approvals": ("statutory_approvals_json", StatutoryApprovalsSection),
    "tax_compliance": ("tax_compliance_json", TaxComplianceSection),
    "litigation_history": ("litigation_history_json", LitigationHistorySection),
    "compliance_status": ("compliance_status_json", ComplianceStatusSection),
}


class MalformedSectionError(ValueError):
    def __init__(self, section: str, reason: str):
        self.section = section
        self.reason = reason
        super().__init__(f"legal audit section '{section}' is malformed: {reason}")


def dump_section(section: BaseModel) -> str:
    return json.dumps(section.model_dump(mode="json"), sort_keys=True)


def load_section(name: str, raw: Optional[str]) -> BaseModel:
    """
    Parse one stored section.

    An absent section yields the model defaults. Stored text that is not a
    JSON object of the section's shape raises MalformedSectionError instead
    of silently becoming an empty section.
    """
    _, model = SECTIONS[name]
    if raw is None or not raw.strip():
        return model()

    try:
        data: Any = json.loads(raw)
    except json.JSONDecodeError as e:
        raise MalformedSectionError(name, f"invalid JSON ({e.msg})")

    if not isinstance(data, dict):
        raise MalformedSectionError(name, f"expected an object, got {type(data).__name__}")

    try:
        return model.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0] if e.errors() else {}
        loc = ".".join(str(x) for x in first.get("loc", ()))
        raise MalformedSectionError(name, f"{loc}: {first.get('msg', 'invalid value')}")


def load_all_sections(row: Any) -> dict[str, BaseModel]:
    return {name: load_section(name, getattr(row, column)) for name, (column, _) in SECTIONS.items()}


def load_sections_collecting_errors(row: Any) -> tuple[dict[str, BaseModel], dict[str, str]]:
    """Like load_all_sections, but a malformed section falls back to defaults and is reported."""
    sections: dict[str, BaseModel] = {}
    errors: dict[str, str] = {}
    for name, (column, model) in SECTIONS.items():
        try:
            sections[name] = load_section(name, getattr(row, column))
        except MalformedSectionError as e:
            sections[name] = model()
            errors[name] = e.reason
    return sections, errors


def write_all_sections(row: Any, sections: dict[str, BaseModel]) -> None:
    """Whole-record write: every section is re-serialized together."""
    for name, (column, model) in SECTIONS.items():
        section = sections.get(name) or model()
        setattr(row, column, dump_section(section))
