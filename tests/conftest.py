import csv
import logging
import random
import pytest
from unittest.mock import MagicMock

from utils import constants

# Attribute templates per element kind; {i} is replaced by a row counter.
ELEMENT_TEMPLATES = {
    "Button": {
        "ControlId": ["btnSubmit{i}", "btnSave{i}", "btnCancel{i}"],
        "Name": ["submit", "save", "cancel"],
        "CSSClass": ["btn btn-primary", "btn btn-secondary", "button"],
        "Value": ["Submit", "Save", "Cancel"],
        "Role": ["button"],
        "Type": ["submit", "button"],
        "Title": ["Submit form", "Save changes", "Cancel editing"],
        "Href": [""],
    },
    "Link": {
        "ControlId": ["lnkHome{i}", "lnkProfile{i}", "lnkHelp{i}"],
        "Name": [""],
        "CSSClass": ["nav-link", "link", "footer-link"],
        "Value": [""],
        "Role": ["link"],
        "Type": [""],
        "Title": ["Go home", "Open profile", "Get help"],
        "Href": ["/home/{i}", "https://example.com/profile/{i}", "/help#{i}"],
    },
    "TextBox": {
        "ControlId": ["txtEmail{i}", "txtName{i}", "txtPhone{i}"],
        "Name": ["email", "fullname", "phone"],
        "CSSClass": ["form-control", "input-text"],
        "Value": ["", "john@example.com"],
        "Role": ["textbox"],
        "Type": ["text", "email", "tel"],
        "Title": ["Email address", "Full name", "Phone number"],
        "Href": [""],
    },
    "CheckBox": {
        "ControlId": ["chkAgree{i}", "chkNews{i}", "chkRemember{i}"],
        "Name": ["agree", "newsletter", "remember"],
        "CSSClass": ["form-check-input", "checkbox"],
        "Value": ["on", "true"],
        "Role": ["checkbox"],
        "Type": ["checkbox"],
        "Title": ["Accept terms", "Subscribe", "Remember me"],
        "Href": [""],
    },
    "DropDown": {
        "ControlId": ["ddlCountry{i}", "ddlState{i}", "ddlLanguage{i}"],
        "Name": ["country", "state", "language"],
        "CSSClass": ["form-select", "dropdown"],
        "Value": ["US", "CA", "en"],
        "Role": ["combobox", "listbox"],
        "Type": ["select-one"],
        "Title": ["Choose country", "Choose state", "Choose language"],
        "Href": [""],
    },
}


def generate_element_rows(n_rows=100, labels=None, seed=0):
    """Deterministic synthetic element records, labels assigned round-robin then shuffled."""
    rnd = random.Random(seed)
    labels = labels or list(ELEMENT_TEMPLATES)
    rows = []
    for i in range(n_rows):
        label = labels[i % len(labels)]
        template = ELEMENT_TEMPLATES[label]
        row = {col: rnd.choice(template[col]).format(i=i) for col in constants.FEATURE_COLUMNS}
        row[constants.LABEL_COLUMN] = label
        rows.append(row)
    rnd.shuffle(rows)
    return rows


def write_element_csv(path, rows, columns=None):
    columns = columns or constants.EXPECTED_COLUMNS
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=columns, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(rows)
    return path


@pytest.fixture
def make_element_csv(tmp_path):
    """Factory writing a synthetic element CSV into tmp_path."""
    def _make(name="training.csv", n_rows=100, labels=None, seed=0, columns=None):
        rows = generate_element_rows(n_rows=n_rows, labels=labels, seed=seed)
        return write_element_csv(tmp_path / name, rows, columns=columns)
    return _make


@pytest.fixture
def element_csv(make_element_csv):
    """100 rows, 5 distinct Element labels, all 9 columns present."""
    return make_element_csv()


@pytest.fixture
def mock_logger():
    """Provides a mock logger."""
    return MagicMock(spec=logging.Logger)


@pytest.fixture
def base_config(tmp_path):
    """Minimal configuration pointing outputs at a temp dir."""
    return {
        "data": {"file_path": str(tmp_path / "training.csv")},
        "splitting": {"test_size": 0.3, "seed": 111},
        "features": {"n_features": 512},
        "training": {"algorithm": "sdca_maximum_entropy", "params": {}},
        "outputs": {"base_results_dir": str(tmp_path / "results")},
    }
