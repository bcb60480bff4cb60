# SPDX-License-Identifier: MIT
"""Tests for document models and text helpers."""

from datetime import datetime, timezone

import pytest
from bson import ObjectId
from pydantic import ValidationError

from maintenance.models import STOP_TYPES, TravelingStop, User
from maintenance.utils.text import normalize_email, parse_int


class TestUserModel:
    """Test mapping of user documents."""

    def test_from_document_reads_camel_case(self):
        user_id = ObjectId()
        user = User.from_document({
            "_id": user_id,
            "email": "pat@treehouse.org",
            "firstName": "Pat",
            "lastName": "Lee",
            "role": "admin",
            "createdAt": datetime(2024, 2, 1, 8, 0),
            "__v": 0,
        })

        assert user.id == user_id
        assert user.full_name == "Pat Lee"
        assert user.is_admin
        assert user.created_at.tzinfo == timezone.utc

    def test_to_document_omits_unset_id(self):
        document = User(email="x@y.org").to_document()

        assert "_id" not in document
        assert document["role"] == "volunteer"

    def test_non_admin_roles(self):
        assert not User(email="x@y.org", role="staff").is_admin
        assert not User(email="x@y.org", role="Admin").is_admin


class TestTravelingStopModel:
    """Test stop validation rules."""

    @pytest.mark.parametrize("stop_type", STOP_TYPES)
    def test_accepts_known_stop_types(self, sample_stop_data, stop_type):
        sample_stop_data["stopType"] = stop_type
        assert TravelingStop.model_validate(sample_stop_data).stop_type == stop_type

    def test_rejects_unknown_stop_type(self, sample_stop_data):
        sample_stop_data["stopType"] = "invalid_type"
        with pytest.raises(ValidationError):
            TravelingStop.model_validate(sample_stop_data)

    @pytest.mark.parametrize("zip_code", ["12345", "12345-6789"])
    def test_accepts_zip_formats(self, sample_stop_data, zip_code):
        sample_stop_data["stopZipCode"] = zip_code
        assert TravelingStop.model_validate(sample_stop_data).stop_zip_code == zip_code

    @pytest.mark.parametrize("zip_code", ["1234", "123456", "12345-678", "ABCDE"])
    def test_rejects_bad_zip_formats(self, sample_stop_data, zip_code):
        sample_stop_data["stopZipCode"] = zip_code
        with pytest.raises(ValidationError):
            TravelingStop.model_validate(sample_stop_data)

    @pytest.mark.parametrize("books", [-1, 100001])
    def test_books_range(self, sample_stop_data, books):
        sample_stop_data["booksDistributed"] = books
        with pytest.raises(ValidationError):
            TravelingStop.model_validate(sample_stop_data)

    def test_stop_name_length_limit(self, sample_stop_data):
        sample_stop_data["stopName"] = "x" * 201
        with pytest.raises(ValidationError):
            TravelingStop.model_validate(sample_stop_data)

    def test_strings_are_trimmed(self, sample_stop_data):
        sample_stop_data["stopName"] = "  Padded Name  "
        sample_stop_data["stopZipCode"] = " 19104 "

        stop = TravelingStop.model_validate(sample_stop_data)

        assert stop.stop_name == "Padded Name"
        assert stop.stop_zip_code == "19104"

    def test_timestamps_default_to_now(self, sample_stop_data):
        stop = TravelingStop.model_validate(sample_stop_data)

        assert stop.created_at.tzinfo == timezone.utc
        assert stop.updated_at >= stop.created_at


class TestTextHelpers:
    """Test email normalisation and lenient integer parsing."""

    def test_normalize_email(self):
        assert normalize_email("Jo@Example.COM") == "jo@example.com"
        assert normalize_email(None) == ""

    @pytest.mark.parametrize(
        "value, expected",
        [
            (42, 42),
            ("42", 42),
            (" 7 books", 7),
            ("-3", -3),
            (12.9, 12),
            ("abc", None),
            (None, None),
            (True, None),
            (float("nan"), None),
        ],
    )
    def test_parse_int(self, value, expected):
        assert parse_int(value) == expected
