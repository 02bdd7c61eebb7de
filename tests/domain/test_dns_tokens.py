from __future__ import annotations

import pytest

from anchorid.domain.dns_tokens import (
    accepted_tokens,
    extract_uuid,
    normalize_txt_value,
    txt_values_match,
)
from tests.support.fakes import OTHER_SUBJECT_ID, SUBJECT_ID, SUBJECT_URL

RESOLVE_PREFIX = "https://anchorid.net/resolve/"

ACCEPTED_FORMS = [
    f"anchor=urn:uuid:{SUBJECT_ID}",
    f"anchor={SUBJECT_ID}",
    f"urn:uuid:{SUBJECT_ID}",
    SUBJECT_URL,
]


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (f'"anchor=urn:uuid:{SUBJECT_ID}"', f"anchor=urn:uuid:{SUBJECT_ID}"),
        (f'  "ANCHOR=urn:uuid:{SUBJECT_ID}"  ', f"anchor=urn:uuid:{SUBJECT_ID}"),
        ('"v=spf1   include:x\t-all"', "v=spf1 include:x -all"),
        ('""', ""),
        ('"unbalanced', '"unbalanced'),
    ],
)
def test_normalize_txt_value(raw: str, expected: str) -> None:
    assert normalize_txt_value(raw) == expected


@pytest.mark.parametrize("form", ACCEPTED_FORMS)
def test_each_accepted_form_yields_the_uuid(form: str) -> None:
    assert extract_uuid(form, RESOLVE_PREFIX) == SUBJECT_ID


@pytest.mark.parametrize("form", ACCEPTED_FORMS)
def test_each_accepted_form_verifies_when_quoted(form: str) -> None:
    assert txt_values_match([f'"{form}"'], SUBJECT_ID, RESOLVE_PREFIX)


def test_extracted_uuid_is_lowercased() -> None:
    assert extract_uuid(f"anchor={SUBJECT_ID.upper()}", RESOLVE_PREFIX) == SUBJECT_ID


@pytest.mark.parametrize(
    "value",
    [
        "anchor=not-a-uuid",
        "urn:uuid:4ff7ed97",
        f"https://other.example/resolve/{SUBJECT_ID}",
        f"see {SUBJECT_ID}",
    ],
)
def test_extract_uuid_rejects_other_values(value: str) -> None:
    assert extract_uuid(value, RESOLVE_PREFIX) is None


def test_match_ignores_unrelated_records_and_other_subjects() -> None:
    values = ['"v=spf1 -all"', f'"anchor=urn:uuid:{OTHER_SUBJECT_ID}"']

    assert not txt_values_match(values, SUBJECT_ID, RESOLVE_PREFIX)
    assert txt_values_match([*values, f'"anchor={SUBJECT_ID}"'], SUBJECT_ID, RESOLVE_PREFIX)


def test_split_record_segments_are_not_joined() -> None:
    segments = ['"anchor=urn:uuid:4ff7ed97-b78f-4ae6"', '"-9011-5af714ee241c"']

    assert not txt_values_match(segments, SUBJECT_ID, RESOLVE_PREFIX)


def test_accepted_tokens_cover_all_forms() -> None:
    assert accepted_tokens(SUBJECT_ID.upper(), RESOLVE_PREFIX) == frozenset(ACCEPTED_FORMS)
