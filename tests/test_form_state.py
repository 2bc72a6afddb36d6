"""Tests for frontend.form_state: cascade, materials list, validator and submit helpers."""

import pytest

from frontend import form_state as fs
from frontend.form_state import FormState


@pytest.fixture
def ready(reference):
    """State with category, supplier and requestor filled in but no materials."""
    state = FormState()
    fs.select_category(state, reference, "Plumbing")
    fs.select_supplier(state, reference, "Reece Plumbing")
    fs.set_field(state, "requestor_name", "Jane Smith")
    fs.set_field(state, "requestor_email", "jane@lcmb.com.au")
    return state


def _add(state, material_id):
    fs.pick_material(state, material_id)
    return fs.add_material(state)


# --- cascade ---


def test_category_options(reference):
    assert fs.category_options(reference) == ["Plumbing", "Electrical"]
    assert fs.category_options(None) == []


def test_select_category_uses_direct_suppliers(reference):
    state = FormState()
    fs.select_category(state, reference, "Plumbing")
    assert [s["name"] for s in state.supplier_options] == ["Reece Plumbing"]
    assert state.materials_enabled is False


def test_select_category_falls_back_to_specialties(reference):
    state = FormState()
    fs.select_category(state, reference, "Electrical")
    assert [s["name"] for s in state.supplier_options] == ["Sparks Wholesale"]


def test_specialty_fallback_without_flat_supplier_list(reference):
    del reference["suppliers"]
    reference["suppliersByCategory"]["Lighting"] = [
        {"id": "SUP-005", "name": "Bright Co", "specialties": ["ELECTRIC"]},
    ]
    assert [s["name"] for s in fs.suppliers_for_category(reference, "Electrical")] == ["Bright Co"]


def test_empty_category_stops_cascade(reference):
    state = FormState()
    fs.select_category(state, reference, "")
    assert state.supplier_options == []
    assert state.submit_enabled is False


def test_select_supplier_shows_info_and_enables_materials(reference):
    state = FormState()
    fs.select_category(state, reference, "Plumbing")
    fs.select_supplier(state, reference, "Reece Plumbing")
    assert state.supplier_info == {"email": "orders@reece.com.au", "phone": "07 3000 1001"}
    assert state.materials_enabled is True
    # MAT-102 belongs to another supplier
    assert [m["id"] for m in state.material_options] == ["MAT-100", "MAT-101"]


def test_supplier_without_contact_details_shows_na(reference):
    state = FormState()
    fs.select_category(state, reference, "Electrical")
    fs.select_supplier(state, reference, "Sparks Wholesale")
    assert state.supplier_info == {"email": "N/A", "phone": "N/A"}
    # no Electrical materials in the catalog
    assert state.materials_enabled is False


def test_clearing_supplier_hides_info(ready, reference):
    fs.select_supplier(ready, reference, "")
    assert ready.supplier_info is None
    assert ready.material_options == []
    assert ready.materials_enabled is False


def test_category_change_clears_downstream(ready, reference):
    _add(ready, "MAT-100")
    assert ready.selected_materials

    fs.select_category(ready, reference, "Electrical")
    assert ready.supplier == ""
    assert ready.selected_materials == []
    assert ready.picked_material == ""
    assert ready.material_options == []
    assert ready.materials_enabled is False
    assert ready.supplier_info is None
    assert ready.submit_enabled is False


def test_subcategory_and_search_filter_visible_materials(ready):
    assert fs.subcategories(ready) == ["Pipes", "Fittings"]
    fs.select_subcategory(ready, "Fittings")
    assert [m["id"] for m in fs.visible_materials(ready)] == ["MAT-101"]
    fs.select_subcategory(ready, "")
    fs.set_search(ready, "pvc")
    assert [m["id"] for m in fs.visible_materials(ready)] == ["MAT-100"]


def test_search_drops_hidden_pick(ready):
    fs.pick_material(ready, "MAT-101")
    fs.set_search(ready, "pipe")
    assert ready.picked_material == ""


def test_grouped_materials_preferred(reference):
    reference["materialsByCategoryAndSupplier"] = {
        "Plumbing": {"SUP-001": [{"id": "MAT-900", "name": "Grouped item"}]},
    }
    supplier = reference["suppliers"][0]
    assert [m["id"] for m in fs.materials_for(reference, "Plumbing", supplier)] == ["MAT-900"]


# --- selected-materials list ---


def test_add_material_appends_with_quantity_one(ready):
    assert _add(ready, "MAT-100") is True
    assert ready.selected_materials == [{
        "id": "MAT-100", "name": "PVC Pipe 50mm", "code": "PVC50",
        "unit": "length", "subcategory": "Pipes", "quantity": 1,
    }]
    assert ready.picked_material == ""


def test_add_without_pick_is_rejected(ready):
    assert fs.add_material(ready) is False
    assert ready.notice == "Please select a material to add."
    assert ready.selected_materials == []


def test_add_duplicate_is_rejected(ready):
    _add(ready, "MAT-100")
    assert _add(ready, "MAT-100") is False
    assert len(ready.selected_materials) == 1
    assert ready.notice == "This material has already been added."


def test_add_keeps_insertion_order(ready):
    _add(ready, "MAT-101")
    _add(ready, "MAT-100")
    assert [m["id"] for m in ready.selected_materials] == ["MAT-101", "MAT-100"]


@pytest.mark.parametrize("index", [-1, 2, 10])
def test_remove_out_of_range_is_noop(ready, index):
    _add(ready, "MAT-100")
    _add(ready, "MAT-101")
    assert fs.remove_material(ready, index) is False
    assert len(ready.selected_materials) == 2


def test_remove_material(ready):
    _add(ready, "MAT-100")
    _add(ready, "MAT-101")
    assert fs.remove_material(ready, 0) is True
    assert [m["id"] for m in ready.selected_materials] == ["MAT-101"]


def test_update_quantity_never_below_one(ready):
    _add(ready, "MAT-100")
    assert fs.update_quantity(ready, 0, 1) is True
    assert ready.selected_materials[0]["quantity"] == 2
    assert fs.update_quantity(ready, 0, -1) is True
    assert fs.update_quantity(ready, 0, -1) is False
    assert ready.selected_materials[0]["quantity"] == 1
    assert fs.update_quantity(ready, 5, 1) is False


def test_render_selected_materials(ready):
    assert fs.render_selected_materials([]) == ([], "No materials selected yet...")
    _add(ready, "MAT-100")
    _add(ready, "MAT-101")
    fs.update_quantity(ready, 1, 2)
    rows, summary = fs.render_selected_materials(ready.selected_materials)
    assert summary == "2 unique materials, 4 total items"
    assert rows[0]["meta"] == "Code: PVC50 • Unit: length • Pipes"
    assert rows[1]["quantity"] == "3 pcs"
    assert rows[0]["can_decrease"] is False
    assert rows[1]["can_decrease"] is True


# --- validator ---


def test_submit_enabled_only_when_everything_holds(ready):
    assert ready.submit_enabled is False
    _add(ready, "MAT-100")
    assert ready.submit_enabled is True


@pytest.mark.parametrize("name,value", [
    ("requestor_name", "   "),
    ("requestor_email", ""),
    ("requestor_email", "jane@lcmb"),
    ("requestor_email", "jane lcmb.com.au"),
    ("requestor_email", " jane@lcmb.com.au"),
])
def test_submit_disabled_for_bad_fields(ready, name, value):
    _add(ready, "MAT-100")
    fs.set_field(ready, name, value)
    assert ready.submit_enabled is False


def test_submit_disabled_when_list_emptied(ready):
    _add(ready, "MAT-100")
    fs.remove_material(ready, 0)
    assert ready.submit_enabled is False


def test_set_field_rejects_unknown_name():
    with pytest.raises(ValueError):
        fs.set_field(FormState(), "supplier", "x")


# --- submitter ---


@pytest.mark.parametrize("request_type,endpoint", [
    ("order", "/api/order/submit"),
    ("quote", "/api/quote/submit"),
    ("other", "/api/quote/submit"),
])
def test_endpoint_for(request_type, endpoint):
    assert fs.endpoint_for(request_type) == endpoint


def test_build_payload(ready):
    _add(ready, "MAT-100")
    fs.set_field(ready, "notes", "Deliver to site 4")
    payload = fs.build_payload(ready)
    assert payload["requestType"] == "order"
    assert payload["category"] == "Plumbing"
    assert payload["supplier"] == "Reece Plumbing"
    assert payload["supplierId"] == "SUP-001"
    assert payload["supplierEmail"] == "orders@reece.com.au"
    assert payload["requestorEmail"] == "jane@lcmb.com.au"
    assert payload["notes"] == "Deliver to site 4"
    assert payload["materials"][0]["quantity"] == 1
    # payload is a copy, not a view of the state
    payload["materials"][0]["quantity"] = 9
    assert ready.selected_materials[0]["quantity"] == 1


@pytest.mark.parametrize("result,expected", [
    ({"success": True, "orderId": "ORD-1"}, "ORD-1"),
    ({"success": True, "quoteId": "Q-7"}, "Q-7"),
    ({"success": True, "id": 42}, "42"),
])
def test_reference_id_prefers_response_ids(result, expected):
    assert fs.reference_id(result, "order") == expected


def test_reference_id_is_synthesized():
    assert fs.reference_id({"success": True}, "order", now=1700000000.5) == "ORDER-1700000000500"
    assert fs.reference_id({}, "quote", now=1.5) == "QUOTE-1500"


def test_submit_success_flow(ready):
    _add(ready, "MAT-100")
    assert fs.request_review(ready) is True
    fs.begin_submit(ready)
    assert ready.busy is True
    assert ready.submit_enabled is False

    fs.finish_submit(ready, result={"success": True}, now=10.0)
    assert ready.busy is False
    assert ready.reviewing is False
    assert ready.success == fs.SuccessView("order", "ORDER-10000", "Reece Plumbing")


def test_submit_failure_restores_controls(ready):
    _add(ready, "MAT-100")
    fs.begin_submit(ready)
    fs.finish_submit(ready, error="HTTP 500")
    assert ready.busy is False
    assert ready.submit_enabled is True
    assert ready.success is None
    assert fs.visible_error(ready, now=10**12) == "Submission failed: HTTP 500"


def test_review_requires_valid_form(ready):
    assert fs.request_review(ready) is False
    assert ready.reviewing is False


# --- banners / dispatch ---


def test_generic_error_auto_dismisses():
    state = FormState()
    fs.show_error(state, "Failed to load form data", now=100.0)
    assert fs.visible_error(state, now=102.0) == "Failed to load form data"
    assert fs.visible_error(state, now=100.0 + fs.ERROR_BANNER_SECONDS) == ""
    assert state.error == ""


def test_dispatch_routes_events(reference):
    state = FormState()
    fs.dispatch(state, reference, "category", "Plumbing")
    fs.dispatch(state, reference, "supplier", "Reece Plumbing")
    fs.dispatch(state, reference, "pick", "MAT-101")
    fs.dispatch(state, reference, "add")
    fs.dispatch(state, reference, "increase", 0)
    fs.dispatch(state, reference, "field", ("requestor_name", "Sam"))
    assert state.selected_materials[0]["quantity"] == 2
    assert state.requestor_name == "Sam"
    fs.dispatch(state, reference, "remove", 0)
    assert state.selected_materials == []


def test_dispatch_unknown_event():
    with pytest.raises(ValueError):
        fs.dispatch(FormState(), None, "explode")


def test_new_request_keeps_request_type(ready):
    ready.request_type = "quote"
    fresh = fs.new_request(ready)
    assert fresh.request_type == "quote"
    assert fresh.category == ""
    assert fresh.selected_materials == []
