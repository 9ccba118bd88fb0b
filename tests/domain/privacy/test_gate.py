from __future__ import annotations

import itertools
from dataclasses import replace

import pytest

from storyledger.domain.model import PrivacyProfile
from storyledger.domain.privacy import (
    ALL_PROFILE_FIELDS,
    HIDDEN,
    PLACEHOLDER,
    PLACEHOLDER_LABEL,
    ProfileField,
    VisibilityFlags,
    parse_profile_fields,
    visibility_flags,
    visible_profile,
)
from tests.helpers.corpus import make_storyteller, public_privacy

FLAG_NAMES = (
    "consent_given",
    "public_display",
    "show_photo",
    "show_location",
    "show_organisation",
)
ALL_PROFILES = [
    PrivacyProfile(**dict(zip(FLAG_NAMES, values, strict=True)))
    for values in itertools.product((False, True), repeat=len(FLAG_NAMES))
]


def test_consent_withheld_hides_everything() -> None:
    storyteller = make_storyteller(
        privacy=PrivacyProfile(
            consent_given=False,
            public_display=True,
            show_photo=True,
            show_location=True,
            show_organisation=True,
        )
    )

    profile = visible_profile(storyteller)

    assert profile == PLACEHOLDER
    assert profile.label == PLACEHOLDER_LABEL
    assert profile.storyteller_id is None
    assert dict(profile.fields) == {}


def test_consent_without_public_display_stays_hidden() -> None:
    storyteller = make_storyteller(
        privacy=PrivacyProfile(consent_given=True, show_photo=True, show_location=True)
    )

    assert visible_profile(storyteller).is_placeholder


def test_listed_storyteller_shows_only_enabled_attributes() -> None:
    storyteller = make_storyteller(
        privacy=public_privacy(show_photo=False, show_location=True, show_organisation=False)
    )

    profile = visible_profile(storyteller)

    assert not profile.is_placeholder
    assert profile.label == "Aunty May Collins"
    assert profile.storyteller_id == storyteller.id
    assert dict(profile.fields) == {
        ProfileField.NAME: "Aunty May Collins",
        ProfileField.LOCATION: "Palm Island",
        ProfileField.BIO: "Elder and keeper of language.",
    }


def test_requested_fields_narrow_the_view() -> None:
    storyteller = make_storyteller(privacy=public_privacy())

    profile = visible_profile(storyteller, {ProfileField.PHOTO, ProfileField.ORGANISATION})

    assert dict(profile.fields) == {
        ProfileField.PHOTO: "https://cdn.example.org/may.jpg",
        ProfileField.ORGANISATION: "Palm Island Community Company",
    }


def test_permitted_but_empty_value_is_none() -> None:
    storyteller = make_storyteller(profile_image_url=None, bio="", privacy=public_privacy())

    profile = visible_profile(storyteller)

    assert profile.fields[ProfileField.PHOTO] is None
    assert profile.fields[ProfileField.BIO] is None


def test_missing_storyteller_renders_placeholder() -> None:
    assert visible_profile(None) == PLACEHOLDER


def test_gate_does_not_modify_storyteller() -> None:
    privacy = public_privacy(show_photo=False)
    storyteller = make_storyteller(privacy=privacy)

    visible_profile(storyteller)

    assert storyteller.privacy == privacy
    assert storyteller.profile_image_url == "https://cdn.example.org/may.jpg"


@pytest.mark.parametrize("profile", ALL_PROFILES)
def test_nothing_is_visible_without_consent_and_public_display(profile: PrivacyProfile) -> None:
    flags = visibility_flags(profile)

    if not (profile.consent_given and profile.public_display):
        assert flags == HIDDEN
        assert not any(flags.permits(profile_field) for profile_field in ProfileField)
    else:
        assert flags.listed
        assert flags.photo is profile.show_photo
        assert flags.location is profile.show_location
        assert flags.organisation is profile.show_organisation


@pytest.mark.parametrize("profile", ALL_PROFILES)
@pytest.mark.parametrize("flag", FLAG_NAMES)
def test_turning_a_flag_off_never_reveals_more(profile: PrivacyProfile, flag: str) -> None:
    storyteller = make_storyteller(privacy=profile)
    restricted = make_storyteller(privacy=replace(profile, **{flag: False}))

    before = set(visible_profile(storyteller).fields)
    after = set(visible_profile(restricted).fields)

    assert after <= before


def test_hidden_flags_permit_nothing() -> None:
    flags = VisibilityFlags(listed=False, photo=True, location=True, organisation=True)

    assert not any(flags.permits(profile_field) for profile_field in ProfileField)


def test_parse_profile_fields() -> None:
    assert parse_profile_fields(" Name, photo ,,bio") == {
        ProfileField.NAME,
        ProfileField.PHOTO,
        ProfileField.BIO,
    }
    assert parse_profile_fields("") == frozenset()
    assert ALL_PROFILE_FIELDS == frozenset(ProfileField)


def test_parse_profile_fields_rejects_unknown_names() -> None:
    with pytest.raises(ValueError, match="email"):
        parse_profile_fields("name,email")
