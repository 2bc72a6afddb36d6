# Streamlit UI for material orders and quote requests, backed by the FastAPI service
import streamlit as st
from dotenv import load_dotenv

from frontend import api_client, form_state
from frontend.api_client import ApiError

load_dotenv()

st.set_page_config(page_title="Material Request Form", layout="wide")
st.title("Material Request Form")

# widget key -> FormState attribute mirrored after every event
WIDGETS = {
    "w_category": "category",
    "w_supplier": "supplier",
    "w_subcategory": "subcategory",
    "w_search": "search",
    "w_pick": "picked_material",
    "w_request_type": "request_type",
    "w_requestor_name": "requestor_name",
    "w_requestor_email": "requestor_email",
    "w_urgency": "urgency",
    "w_project_ref": "project_ref",
    "w_notes": "notes",
}


def _form() -> form_state.FormState:
    if "form" not in st.session_state:
        st.session_state["form"] = form_state.new_request()
    return st.session_state["form"]


def _reference():
    return st.session_state.get("reference")


def _sync_widgets(form):
    for key, attr in WIDGETS.items():
        st.session_state[key] = getattr(form, attr)


def _load_reference():
    form = _form()
    try:
        st.session_state["reference"] = api_client.load_reference_data()
    except ApiError as e:
        st.session_state["reference"] = None
        form_state.show_error(form, str(e))


def _on_event(event, key=None, value=None):
    form = _form()
    if key is not None:
        value = st.session_state[key]
    form_state.dispatch(form, _reference(), event, value)
    _sync_widgets(form)


def _on_field(name, key):
    _on_event("field", value=(name, st.session_state[key]))


def _new_request():
    st.session_state["form"] = form_state.new_request(_form())
    _sync_widgets(st.session_state["form"])


def _submit():
    form = _form()
    payload = form_state.build_payload(form)
    form_state.begin_submit(form)
    try:
        with st.spinner("Submitting..."):
            result = api_client.submit_request(payload)
    except ApiError as e:
        form_state.finish_submit(form, error=str(e))
    else:
        form_state.finish_submit(form, result=result)


form = _form()
if "reference" not in st.session_state:
    _load_reference()
for key, attr in WIDGETS.items():
    st.session_state.setdefault(key, getattr(form, attr))
data = _reference()

error = form_state.visible_error(form)
if error:
    st.error(error)

tabs = st.tabs(["New request", "Order history"])

with tabs[0]:
    if form.success is not None:
        view = form.success
        st.success(f"Your {view.request_type} request has been submitted successfully and sent to the supplier!")
        st.markdown(f"**Reference:** `{view.reference_id}`  \n**Supplier:** {view.supplier}")
        st.button("Start a new request", on_click=_new_request)

    elif form.reviewing:
        payload = form_state.build_payload(form)
        label = "Material Order" if form.request_type == "order" else "Quote Request"
        st.header(f"Review {label}")
        c1, c2 = st.columns(2)
        c1.markdown(
            f"**Category:** {payload['category']}  \n"
            f"**Urgency:** {payload['urgency'] or 'Normal'}  \n"
            f"**Project ref:** {payload['projectRef'] or 'Not specified'}"
        )
        c2.markdown(
            f"**Supplier:** {payload['supplier']}  \n"
            f"**Supplier email:** {payload['supplierEmail'] or 'Not available'}  \n"
            f"**Requestor:** {payload['requestorName']} <{payload['requestorEmail']}>"
        )
        rows, summary = form_state.render_selected_materials(form.selected_materials)
        st.markdown(f"**{summary}**")
        st.table([{"Material": r["name"], "Details": r["meta"], "Quantity": r["quantity"]} for r in rows])
        if payload["notes"].strip():
            st.markdown(f"**Notes:** {payload['notes']}")
        b1, b2 = st.columns(2)
        b1.button("Back to edit", on_click=_on_event, args=("edit",), disabled=form.busy)
        b2.button("Confirm and send", type="primary", on_click=_submit, disabled=form.busy)

    else:
        if data is None:
            st.warning("Form data is unavailable.")
            st.button("Reload data", on_click=_load_reference)

        st.radio(
            "Request type", options=["order", "quote"], key="w_request_type", horizontal=True,
            format_func=lambda v: "Material Order" if v == "order" else "Quote Request",
            on_change=_on_field, args=("request_type", "w_request_type"),
        )

        st.subheader("Category & supplier")
        col1, col2 = st.columns(2)
        col1.selectbox(
            "Category", options=[""] + form_state.category_options(data), key="w_category",
            format_func=lambda v: v or "Select a category...",
            on_change=_on_event, args=("category", "w_category"),
        )
        col2.selectbox(
            "Supplier", options=[""] + [s["name"] for s in form.supplier_options], key="w_supplier",
            format_func=lambda v: v or "Select a supplier...",
            disabled=not form.category,
            on_change=_on_event, args=("supplier", "w_supplier"),
        )
        if form.supplier_info:
            st.info(f"📧 {form.supplier_info['email']}   📞 {form.supplier_info['phone']}")

        st.subheader("Materials")
        col1, col2 = st.columns(2)
        col1.selectbox(
            "Subcategory", options=[""] + form_state.subcategories(form), key="w_subcategory",
            format_func=lambda v: v or "All subcategories",
            disabled=not form.materials_enabled,
            on_change=_on_event, args=("subcategory", "w_subcategory"),
        )
        col2.text_input(
            "Search materials", key="w_search",
            placeholder="Search by name or code..." if form.materials_enabled else "Select category and supplier first...",
            disabled=not form.materials_enabled,
            on_change=_on_event, args=("search", "w_search"),
        )
        names = {m["id"]: f"{m['name']} ({m.get('code') or 'no code'}, {m.get('unit') or 'pcs'})"
                 for m in form.material_options}
        col1, col2 = st.columns([4, 1])
        col1.selectbox(
            "Material", options=[""] + [m["id"] for m in form_state.visible_materials(form)], key="w_pick",
            format_func=lambda v: names.get(v, "Select a material..."),
            disabled=not form.materials_enabled,
            on_change=_on_event, args=("pick", "w_pick"),
        )
        col2.button("Add", on_click=_on_event, args=("add",), disabled=not form.materials_enabled)
        if form.notice:
            st.warning(form.notice)

        rows, summary = form_state.render_selected_materials(form.selected_materials)
        for row in rows:
            c1, c2, c3, c4, c5 = st.columns([5, 1, 2, 1, 1])
            c1.markdown(f"**{row['name']}**  \n{row['meta']}")
            c2.button("−", key=f"dec_{row['index']}", on_click=_on_event, args=("decrease", None, row["index"]),
                      disabled=not row["can_decrease"])
            c3.write(row["quantity"])
            c4.button("+", key=f"inc_{row['index']}", on_click=_on_event, args=("increase", None, row["index"]))
            c5.button("Remove", key=f"rm_{row['index']}", on_click=_on_event, args=("remove", None, row["index"]))
        st.caption(summary)

        st.subheader("Requestor")
        col1, col2 = st.columns(2)
        col1.text_input("Your name", key="w_requestor_name",
                        on_change=_on_field, args=("requestor_name", "w_requestor_name"))
        col2.text_input("Your email", key="w_requestor_email",
                        on_change=_on_field, args=("requestor_email", "w_requestor_email"))
        col1.selectbox("Urgency", options=list(form_state.URGENCY_LEVELS), key="w_urgency",
                       on_change=_on_field, args=("urgency", "w_urgency"))
        col2.text_input("Project reference", key="w_project_ref",
                        on_change=_on_field, args=("project_ref", "w_project_ref"))
        st.text_area("Notes", key="w_notes", on_change=_on_field, args=("notes", "w_notes"))

        label = "Review Order" if form.request_type == "order" else "Review Quote Request"
        st.button(label, type="primary", on_click=_on_event, args=("review",), disabled=not form.submit_enabled)

with tabs[1]:
    st.header("Order history")
    if st.button("Load order history"):
        try:
            history = api_client.load_order_history()
        except ApiError as e:
            st.error(str(e))
        else:
            orders = history.get("orders") or []
            if orders:
                st.json(orders)
            else:
                st.info("No orders yet.")
