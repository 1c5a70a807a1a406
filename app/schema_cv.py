"""
Canonical CV shape: the empty record, the fixed field set of every
repeatable section, and how each field is presented in the form.
"""
from __future__ import annotations
import copy
from typing import Dict, List, NamedTuple


class FieldSpec(NamedTuple):
    name: str
    placeholder: str
    multiline: bool = False


# canonical schema (empty lists – entries are added from the form)
CV_SCHEMA = {
    "personalDetails": {
        "name": "",
        "email": "",
        "phone": "",
        "linkedin": "",
        "profilePicture": "",
    },
    "professionalSummary": "",
    "workExperience": [],
    "education": [],
    "skills": [],
    "projects": [],
    "certifications": [],
}

SECTION_FIELDS: Dict[str, List[FieldSpec]] = {
    "workExperience": [
        FieldSpec("title", "Job Title"),
        FieldSpec("company", "Company"),
        FieldSpec("description", "Description", multiline=True),
    ],
    "education": [
        FieldSpec("degree", "Degree"),
        FieldSpec("institution", "Institution"),
    ],
    "skills": [FieldSpec("skill", "Skill")],
    "projects": [
        FieldSpec("name", "Project Name"),
        FieldSpec("description", "Description", multiline=True),
    ],
    "certifications": [FieldSpec("name", "Certification Name")],
}

SECTIONS = tuple(SECTION_FIELDS)

# add/remove controls use the short names
SECTION_ALIASES = {
    "experience": "workExperience",
    "education": "education",
    "skill": "skills",
    "project": "projects",
    "certification": "certifications",
}

SECTION_TITLES = {
    "workExperience": "Work Experience",
    "education": "Education",
    "skills": "Skills",
    "projects": "Projects",
    "certifications": "Certifications",
}

PERSONAL_FIELDS: List[FieldSpec] = [
    FieldSpec("name", "Full Name"),
    FieldSpec("email", "Email"),
    FieldSpec("phone", "Phone"),
    FieldSpec("linkedin", "LinkedIn Profile"),
]

SUMMARY_KEY = "professionalSummary"
SUMMARY_FIELD = FieldSpec("summary", "Professional Summary", multiline=True)

# bare keys accepted for top-level scalars
SCALAR_KEYS = {
    **{name: ("personalDetails", name) for name in CV_SCHEMA["personalDetails"]},
    "summary": (SUMMARY_KEY,),
    SUMMARY_KEY: (SUMMARY_KEY,),
}


def resolve_section(section: str) -> str | None:
    """Canonical section key for `section` (either spelling), or None."""
    if section in SECTION_FIELDS:
        return section
    return SECTION_ALIASES.get(section)


def field_names(section: str) -> List[str]:
    return [f.name for f in SECTION_FIELDS[section]]


def blank_entry(section: str) -> Dict[str, str]:
    """A fresh entry with every field of the section's shape set to ''."""
    return {name: "" for name in field_names(section)}


def new_record() -> Dict:
    return copy.deepcopy(CV_SCHEMA)


def normalise_record(raw) -> Dict | None:
    """
    Coerce loaded data onto the fixed shape.

    Missing keys get their defaults, entries lose unknown fields and gain
    missing ones, non-string scalars become ''. Returns None when the data
    is not shaped like a record at all.
    """
    if not isinstance(raw, dict):
        return None
    out = new_record()

    details = raw.get("personalDetails", {})
    if not isinstance(details, dict):
        return None
    for key in out["personalDetails"]:
        out["personalDetails"][key] = _text(details.get(key))
    out[SUMMARY_KEY] = _text(raw.get(SUMMARY_KEY))

    for section in SECTIONS:
        entries = raw.get(section, [])
        if not isinstance(entries, list):
            return None
        for entry in entries:
            if not isinstance(entry, dict):
                return None
            out[section].append({k: _text(entry.get(k)) for k in field_names(section)})
    return out


def _text(value) -> str:
    return value if isinstance(value, str) else ""
