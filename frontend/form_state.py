# form_state.py
# Request form state and the pure functions that drive it.
#
# The Streamlit page owns exactly one FormState per session and never mutates
# it directly: widgets dispatch named events through dispatch(), which runs the
# cascade / materials list / validator logic below. Nothing here touches
# Streamlit, so the whole flow is testable with plain dicts.
import re
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
REQUIRED_FIELDS = ("category", "supplier", "requestor_name", "requestor_email")
TEXT_FIELDS = ("requestor_name", "requestor_email", "request_type", "urgency", "project_ref", "notes")

ORDER_ENDPOINT = "/api/order/submit"
QUOTE_ENDPOINT = "/api/quote/submit"

ERROR_BANNER_SECONDS = 5
URGENCY_LEVELS = ("Normal", "Urgent", "Critical")


@dataclass
class SuccessView:
    request_type: str
    reference_id: str
    supplier: str


@dataclass
class FormState:
    request_type: str = "order"
    category: str = ""
    supplier: str = ""
    requestor_name: str = ""
    requestor_email: str = ""
    urgency: str = "Normal"
    project_ref: str = ""
    notes: str = ""

    supplier_options: List[Dict[str, Any]] = field(default_factory=list)
    supplier_info: Optional[Dict[str, str]] = None
    material_options: List[Dict[str, Any]] = field(default_factory=list)
    subcategory: str = ""
    search: str = ""
    picked_material: str = ""
    selected_materials: List[Dict[str, Any]] = field(default_factory=list)

    materials_enabled: bool = False
    submit_enabled: bool = False
    busy: bool = False
    reviewing: bool = False

    notice: str = ""
    error: str = ""
    error_at: Optional[float] = None
    error_sticky: bool = False
    success: Optional[SuccessView] = None


# --- reference data lookups ---

def category_options(data: Optional[Dict[str, Any]]) -> List[str]:
    if not data:
        return []
    return [c["name"] for c in data.get("categories") or [] if c.get("name")]


def _all_suppliers(data: Dict[str, Any]) -> List[Dict[str, Any]]:
    if data.get("suppliers"):
        return list(data["suppliers"])
    seen, out = set(), []
    for suppliers in (data.get("suppliersByCategory") or {}).values():
        for s in suppliers:
            key = s.get("id") or s.get("name")
            if key not in seen:
                seen.add(key)
                out.append(s)
    return out


def _specialty_matches(specialty: str, category: str) -> bool:
    specialty, category = specialty.lower(), category.lower()
    return bool(specialty) and (category in specialty or specialty in category)


def suppliers_for_category(data: Dict[str, Any], category: str) -> List[Dict[str, Any]]:
    """Suppliers keyed under the category, else those whose specialties overlap its name."""
    direct = (data.get("suppliersByCategory") or {}).get(category) or []
    if direct:
        return list(direct)
    return [
        s for s in _all_suppliers(data)
        if any(_specialty_matches(sp, category) for sp in s.get("specialties") or [])
    ]


def materials_for(data: Dict[str, Any], category: str, supplier: Dict[str, Any]) -> List[Dict[str, Any]]:
    supplier_id = supplier.get("id")
    grouped = (data.get("materialsByCategoryAndSupplier") or {}).get(category) or {}
    if supplier_id and grouped.get(supplier_id):
        return list(grouped[supplier_id])
    materials = (data.get("materials") or {}).get(category) or []
    if not supplier_id:
        return list(materials)
    return [m for m in materials if m.get("supplierId") in (None, "", supplier_id)]


def visible_materials(state: FormState) -> List[Dict[str, Any]]:
    term = state.search.strip().lower()
    out = []
    for m in state.material_options:
        if state.subcategory and m.get("subcategory") != state.subcategory:
            continue
        if term and term not in m.get("name", "").lower() and term not in (m.get("code") or "").lower():
            continue
        out.append(m)
    return out


def subcategories(state: FormState) -> List[str]:
    seen = []
    for m in state.material_options:
        sub = m.get("subcategory")
        if sub and sub not in seen:
            seen.append(sub)
    return seen


def current_supplier(state: FormState) -> Optional[Dict[str, Any]]:
    return next((s for s in state.supplier_options if s.get("name") == state.supplier), None)


# --- validator ---

def is_valid(state: FormState) -> bool:
    for name in REQUIRED_FIELDS:
        if not getattr(state, name).strip():
            return False
    if not EMAIL_RE.match(state.requestor_email):
        return False
    return len(state.selected_materials) > 0


def validate(state: FormState) -> bool:
    valid = is_valid(state)
    state.submit_enabled = valid and not state.busy
    return valid


# --- cascade ---

def _reset_materials(state: FormState):
    state.material_options = []
    state.selected_materials = []
    state.picked_material = ""
    state.subcategory = ""
    state.search = ""
    state.materials_enabled = False


def select_category(state: FormState, data: Optional[Dict[str, Any]], category: str):
    state.category = category or ""
    state.supplier = ""
    state.supplier_options = []
    state.supplier_info = None
    _reset_materials(state)
    if state.category and data:
        state.supplier_options = suppliers_for_category(data, state.category)
    validate(state)


def select_supplier(state: FormState, data: Optional[Dict[str, Any]], supplier: str):
    state.supplier = supplier or ""
    _reset_materials(state)
    if not state.supplier:
        state.supplier_info = None
        validate(state)
        return

    chosen = current_supplier(state) or {"name": state.supplier}
    state.supplier_info = {
        "email": chosen.get("email") or "N/A",
        "phone": chosen.get("phone") or "N/A",
    }
    if state.category and data:
        options = materials_for(data, state.category, chosen)
        if options:
            state.material_options = options
            state.materials_enabled = True
    validate(state)


def select_subcategory(state: FormState, subcategory: str):
    state.subcategory = subcategory or ""
    state.picked_material = ""


def set_search(state: FormState, term: str):
    state.search = term or ""
    if state.picked_material not in {m["id"] for m in visible_materials(state)}:
        state.picked_material = ""


def pick_material(state: FormState, material_id: str):
    state.picked_material = material_id or ""
    state.notice = ""


def set_field(state: FormState, name: str, value: str):
    if name not in TEXT_FIELDS:
        raise ValueError(f"Unknown form field: {name}")
    setattr(state, name, value or "")
    validate(state)


# --- selected-materials list ---

def add_material(state: FormState) -> bool:
    picked = state.picked_material
    if not picked:
        state.notice = "Please select a material to add."
        return False
    if any(m["id"] == picked for m in state.selected_materials):
        state.notice = "This material has already been added."
        return False
    material = next((m for m in state.material_options if m.get("id") == picked), None)
    if material is None:
        state.notice = "Material not found."
        return False

    state.selected_materials.append({
        "id": material["id"],
        "name": material.get("name", ""),
        "code": material.get("code") or "",
        "unit": material.get("unit") or "pcs",
        "subcategory": material.get("subcategory") or "",
        "quantity": 1,
    })
    state.picked_material = ""
    state.notice = ""
    validate(state)
    return True


def remove_material(state: FormState, index: int) -> bool:
    if not 0 <= index < len(state.selected_materials):
        return False
    del state.selected_materials[index]
    validate(state)
    return True


def update_quantity(state: FormState, index: int, change: int) -> bool:
    if not 0 <= index < len(state.selected_materials):
        return False
    material = state.selected_materials[index]
    if material["quantity"] + change < 1:
        return False
    material["quantity"] += change
    validate(state)
    return True


def render_selected_materials(materials: List[Dict[str, Any]]) -> Tuple[List[Dict[str, Any]], str]:
    """Project the selected list to display rows plus a summary line."""
    if not materials:
        return [], "No materials selected yet..."
    rows = []
    for index, m in enumerate(materials):
        meta = []
        if m.get("code"):
            meta.append(f"Code: {m['code']}")
        meta.append(f"Unit: {m['unit']}")
        if m.get("subcategory"):
            meta.append(m["subcategory"])
        rows.append({
            "index": index,
            "name": m["name"],
            "meta": " • ".join(meta),
            "quantity": f"{m['quantity']} {m['unit']}",
            "can_decrease": m["quantity"] > 1,
        })
    total = sum(m["quantity"] for m in materials)
    return rows, f"{len(materials)} unique materials, {total} total items"


# --- submitter ---

def endpoint_for(request_type: str) -> str:
    return ORDER_ENDPOINT if request_type == "order" else QUOTE_ENDPOINT


def build_payload(state: FormState) -> Dict[str, Any]:
    supplier = current_supplier(state) or {}
    return {
        "requestType": state.request_type,
        "category": state.category,
        "supplier": state.supplier,
        "requestorName": state.requestor_name.strip(),
        "requestorEmail": state.requestor_email.strip(),
        "urgency": state.urgency,
        "projectRef": state.project_ref,
        "notes": state.notes,
        "supplierEmail": supplier.get("email", ""),
        "supplierPhone": supplier.get("phone", ""),
        "supplierId": supplier.get("id", ""),
        "materials": [dict(m) for m in state.selected_materials],
    }


def reference_id(result: Dict[str, Any], request_type: str, now: Optional[float] = None) -> str:
    found = result.get("orderId") or result.get("quoteId") or result.get("id")
    if found:
        return str(found)
    kind = "order" if request_type == "order" else "quote"
    millis = int((time.time() if now is None else now) * 1000)
    return f"{kind.upper()}-{millis}"


def request_review(state: FormState) -> bool:
    if not validate(state):
        return False
    state.reviewing = True
    return True


def cancel_review(state: FormState):
    state.reviewing = False


def begin_submit(state: FormState):
    state.busy = True
    state.submit_enabled = False
    state.error = ""


def finish_submit(state: FormState, result: Optional[Dict[str, Any]] = None,
                  error: Optional[str] = None, now: Optional[float] = None):
    state.busy = False
    if error is not None or result is None:
        show_error(state, f"Submission failed: {error or 'no response'}", now=now, sticky=True)
    else:
        kind = "order" if state.request_type == "order" else "quote"
        state.success = SuccessView(kind, reference_id(result, state.request_type, now), state.supplier)
        state.reviewing = False
    validate(state)


# --- banners ---

def show_error(state: FormState, message: str, now: Optional[float] = None, sticky: bool = False):
    state.error = message
    state.error_at = time.time() if now is None else now
    state.error_sticky = sticky


def visible_error(state: FormState, now: Optional[float] = None) -> str:
    if not state.error:
        return ""
    if state.error_sticky or state.error_at is None:
        return state.error
    now = time.time() if now is None else now
    if now - state.error_at >= ERROR_BANNER_SECONDS:
        state.error = ""
        return ""
    return state.error


# --- event dispatch ---

Handler = Callable[[FormState, Optional[Dict[str, Any]], Any], Any]

HANDLERS: Dict[str, Handler] = {
    "category": lambda s, d, v: select_category(s, d, v),
    "supplier": lambda s, d, v: select_supplier(s, d, v),
    "subcategory": lambda s, d, v: select_subcategory(s, v),
    "search": lambda s, d, v: set_search(s, v),
    "pick": lambda s, d, v: pick_material(s, v),
    "add": lambda s, d, v: add_material(s),
    "remove": lambda s, d, v: remove_material(s, v),
    "increase": lambda s, d, v: update_quantity(s, v, 1),
    "decrease": lambda s, d, v: update_quantity(s, v, -1),
    "field": lambda s, d, v: set_field(s, *v),
    "review": lambda s, d, v: request_review(s),
    "edit": lambda s, d, v: cancel_review(s),
}


def dispatch(state: FormState, data: Optional[Dict[str, Any]], event: str, value: Any = None):
    try:
        handler = HANDLERS[event]
    except KeyError:
        raise ValueError(f"Unknown form event: {event}") from None
    return handler(state, data, value)


def new_request(state: Optional[FormState] = None) -> FormState:
    """Fresh state for the next request; keeps the chosen request type."""
    fresh = FormState()
    if state is not None:
        fresh.request_type = state.request_type
    validate(fresh)
    return fresh
