# models.py
# Pydantic models for reference data and submissions. Wire format is camelCase.

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import List, Optional, Dict, Any, Union

# same shape the form checks before enabling submit
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Category(WireModel):
    name: str
    description: Optional[str] = None


class Supplier(WireModel):
    id: str = ""
    name: str
    email: str = ""
    phone: str = ""
    specialties: List[str] = Field(default_factory=list)


class Material(WireModel):
    id: str
    name: str
    code: str = ""
    unit: str = "pcs"
    subcategory: str = ""
    supplier_id: Optional[str] = None


class SelectedMaterial(WireModel):
    id: str
    name: str
    code: str = ""
    unit: str = "pcs"
    subcategory: str = ""
    quantity: int = Field(default=1, ge=1)


class ReferenceData(WireModel):
    categories: List[Category] = Field(default_factory=list)
    suppliers_by_category: Dict[str, List[Supplier]] = Field(default_factory=dict)
    materials: Dict[str, List[Material]] = Field(default_factory=dict)
    suppliers: List[Supplier] = Field(default_factory=list)


class LoadResponse(WireModel):
    success: bool
    data: Optional[ReferenceData] = None
    error: Optional[str] = None


class SubmissionRequest(WireModel):
    # unknown form fields are forwarded upstream untouched
    model_config = ConfigDict(extra="allow")

    request_type: str = "order"
    category: str
    supplier: str
    requestor_name: str
    requestor_email: str
    urgency: Optional[str] = None
    project_ref: Optional[str] = None
    notes: Optional[str] = None
    supplier_email: Optional[str] = None
    supplier_phone: Optional[str] = None
    supplier_id: Optional[str] = None
    materials: List[SelectedMaterial] = Field(default_factory=list)

    def summary(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "supplier": self.supplier,
            "materials": len(self.materials),
            "requestorName": self.requestor_name,
        }

    @field_validator("requestor_email")
    @classmethod
    def check_email(cls, v: str) -> str:
        if not EMAIL_RE.match(v):
            raise ValueError("requestorEmail must look like name@domain.tld")
        return v


class SubmissionResult(WireModel):
    model_config = ConfigDict(extra="allow")

    success: bool = True
    order_id: Optional[Union[str, int]] = None
    quote_id: Optional[Union[str, int]] = None
    id: Optional[Union[str, int]] = None
    error: Optional[str] = None


class SubmissionRecord(BaseModel):
    reference_id: str
    request_type: str
    submitted_at: str
    payload: Dict[str, Any] = Field(default_factory=dict)
