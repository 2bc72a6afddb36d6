import json

import pytest

from backend.app import settings, storage

REFERENCE = {
    "categories": [
        {"name": "Plumbing", "description": "Pipes and fittings"},
        {"name": "Electrical", "description": "Cable and lighting"},
    ],
    "suppliersByCategory": {
        "Plumbing": [
            {"id": "SUP-001", "name": "Reece Plumbing", "email": "orders@reece.com.au",
             "phone": "07 3000 1001", "specialties": ["Plumbing"]},
        ],
    },
    "suppliers": [
        {"id": "SUP-001", "name": "Reece Plumbing", "email": "orders@reece.com.au",
         "phone": "07 3000 1001", "specialties": ["Plumbing"]},
        {"id": "SUP-002", "name": "Sparks Wholesale", "email": "", "phone": "",
         "specialties": ["Electric wiring"]},
    ],
    "materials": {
        "Plumbing": [
            {"id": "MAT-100", "name": "PVC Pipe 50mm", "code": "PVC50", "unit": "length",
             "subcategory": "Pipes", "supplierId": "SUP-001"},
            {"id": "MAT-101", "name": "Copper Elbow 15mm", "code": "CUE15", "unit": "pcs",
             "subcategory": "Fittings", "supplierId": "SUP-001"},
            {"id": "MAT-102", "name": "Ball Valve 20mm", "code": "BV20", "unit": "pcs",
             "subcategory": "Fittings", "supplierId": "SUP-009"},
        ],
    },
}


@pytest.fixture
def reference():
    return json.loads(json.dumps(REFERENCE))


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(storage, "DATA_DIR", tmp_path)
    (tmp_path / "reference.json").write_text(json.dumps(REFERENCE))
    return tmp_path


@pytest.fixture
def local_mode(monkeypatch, data_dir):
    for name in ("DATA_LOAD_WEBHOOK", "ORDER_SUBMIT_WEBHOOK", "QUOTE_SUBMIT_WEBHOOK", "ORDER_HISTORY_WEBHOOK"):
        monkeypatch.setattr(settings, name, "")
    return data_dir
