"""
Metadata field definitions and resolution.

Personal details can come from two places: the document frontmatter or
environment variables (often loaded from a .env file so the markdown can be
shared without contact details). For each field:

1. The first non-blank frontmatter value among the field's frontmatter keys
2. Otherwise the first non-blank value among the field's environment variables
3. Otherwise the field is absent

Frontmatter always wins when it is non-blank, even if the environment holds a
different non-blank value. A blank frontmatter value falls through to the
environment.
"""

import os
import re
from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Mapping, Optional, Tuple


@dataclass(frozen=True)
class MetadataFieldDef:
    """
    How a metadata field is looked up.

    Attributes:
        env_vars: Environment variable names, in priority order
        frontmatter_keys: Frontmatter keys, in priority order
        required: Whether validation fails without this field
    """

    env_vars: Tuple[str, ...]
    frontmatter_keys: Tuple[str, ...]
    required: bool = False


METADATA_FIELDS: Dict[str, MetadataFieldDef] = {
    "name": MetadataFieldDef(("NAME",), ("name",), required=True),
    "name_ja": MetadataFieldDef(("NAME_JA",), ("name_ja",)),
    "name_furigana": MetadataFieldDef(
        ("NAME_FURIGANA", "NAME_HURIGANA"), ("name_furigana", "name_hurigana")
    ),
    "email_address": MetadataFieldDef(
        ("EMAIL_ADDRESS", "EMAIL_ADDRESS1"), ("email_address", "email_address1"), required=True
    ),
    "email_address2": MetadataFieldDef(("EMAIL_ADDRESS2",), ("email_address2",)),
    "phone_number": MetadataFieldDef(
        ("PHONE_NUMBER", "PHONE_NUMBER1"), ("phone_number", "phone_number1"), required=True
    ),
    "phone_number2": MetadataFieldDef(("PHONE_NUMBER2",), ("phone_number2",)),
    "post_code": MetadataFieldDef(("POST_CODE", "POST_CODE1"), ("post_code", "post_code1")),
    "home_address": MetadataFieldDef(
        ("HOME_ADDRESS", "HOME_ADDRESS1"), ("home_address", "home_address1")
    ),
    "home_address_furigana": MetadataFieldDef(
        (
            "HOME_ADDRESS_FURIGANA",
            "HOME_ADDRESS_HURIGANA",
            "HOME_ADDRESS1_FURIGANA",
            "HOME_ADDRESS1_HURIGANA",
        ),
        (
            "home_address_furigana",
            "home_address_hurigana",
            "home_address1_furigana",
            "home_address1_hurigana",
        ),
    ),
    "post_code2": MetadataFieldDef(("POST_CODE2",), ("post_code2",)),
    "home_address2": MetadataFieldDef(("HOME_ADDRESS2",), ("home_address2",)),
    "home_address2_furigana": MetadataFieldDef(
        ("HOME_ADDRESS2_FURIGANA", "HOME_ADDRESS2_HURIGANA"),
        ("home_address2_furigana", "home_address2_hurigana"),
    ),
    "gender": MetadataFieldDef(("GENDER",), ("gender",)),
    "dob": MetadataFieldDef(("DOB", "DATE_OF_BIRTH"), ("dob", "date_of_birth")),
    "linkedin": MetadataFieldDef(("LINKEDIN", "LINKEDIN_URL"), ("linkedin", "linkedin_url")),
    "github": MetadataFieldDef(("GITHUB", "GITHUB_URL"), ("github", "github_url")),
    "website": MetadataFieldDef(("WEBSITE", "WEBSITE_URL"), ("website", "website_url")),
}

# Date of birth formats: YYYY-MM-DD / YYYY/MM/DD, YYYY年MM月DD日, MM/DD/YYYY / MM-DD-YYYY
DOB_ISO = re.compile(r"^(\d{4})[-/](\d{1,2})[-/](\d{1,2})$")
DOB_JAPANESE = re.compile(r"^(\d{4})年(\d{1,2})月(\d{1,2})日$")
DOB_US = re.compile(r"^(\d{1,2})[-/](\d{1,2})[-/](\d{4})$")

GENDER_ALIASES = {
    "male": "male",
    "m": "male",
    "男": "male",
    "female": "female",
    "f": "female",
    "女": "female",
    "other": "other",
}


def _non_blank(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = str(value)
    return value if value.strip() else None


def get_required_fields() -> List[str]:
    return [name for name, definition in METADATA_FIELDS.items() if definition.required]


def load_from_frontmatter(field_name: str, frontmatter: Mapping[str, str]) -> Optional[str]:
    """First non-blank frontmatter value for a field, or None."""
    definition = METADATA_FIELDS.get(field_name)
    if definition is None:
        return None
    for key in definition.frontmatter_keys:
        value = _non_blank(frontmatter.get(key))
        if value is not None:
            return value
    return None


def load_from_env(field_name: str, environ: Mapping[str, str] = None) -> Optional[str]:
    """First non-blank environment value for a field, or None."""
    definition = METADATA_FIELDS.get(field_name)
    if definition is None:
        return None
    if environ is None:
        environ = os.environ
    for env_var in definition.env_vars:
        value = _non_blank(environ.get(env_var))
        if value is not None:
            return value
    return None


def resolve_metadata(
    frontmatter: Mapping[str, str], environ: Mapping[str, str] = None
) -> Dict[str, str]:
    """
    Resolve every known metadata field.

    Args:
        frontmatter: Raw frontmatter values keyed by frontmatter key
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Dict of canonical field name to value; absent fields are omitted
    """
    if environ is None:
        environ = os.environ

    metadata = {}
    for field_name in METADATA_FIELDS:
        value = load_from_frontmatter(field_name, frontmatter)
        if value is None:
            value = load_from_env(field_name, environ)
        if value is not None:
            metadata[field_name] = value
    return metadata


def find_missing_required_fields(
    metadata: Mapping[str, str], environ: Mapping[str, str] = None
) -> List[str]:
    """Required fields that are still blank after resolving against the environment."""
    resolved = resolve_metadata(metadata, environ)
    return [name for name in get_required_fields() if name not in resolved]


def missing_field_message(field_name: str) -> str:
    """Error text naming both ways to supply a missing field."""
    definition = METADATA_FIELDS[field_name]
    env_vars = " or ".join(definition.env_vars)
    keys = " or ".join(definition.frontmatter_keys)
    return (
        f"Missing required field: {field_name}. "
        f"Set via environment variable ({env_vars}) or frontmatter ({keys})."
    )


def parse_gender(value: Optional[str]) -> Optional[str]:
    """Normalize gender to 'male', 'female' or 'other'; None when unrecognized."""
    if not value:
        return None
    return GENDER_ALIASES.get(value.strip().lower())


def parse_date_of_birth(value: Optional[str]) -> Optional[date]:
    """Parse a date of birth in any supported format; None when unrecognized."""
    if not value:
        return None
    text = value.strip()

    try:
        match = DOB_ISO.match(text) or DOB_JAPANESE.match(text)
        if match:
            return date(int(match.group(1)), int(match.group(2)), int(match.group(3)))

        match = DOB_US.match(text)
        if match:
            return date(int(match.group(3)), int(match.group(1)), int(match.group(2)))
    except ValueError:
        # Out-of-range month or day
        return None

    return None
