from datetime import date, datetime
from decimal import Decimal

from mdmblock.utils import equals_ignore_case, resource_type_of, value_as_string


def test_resource_type_of():
    assert resource_type_of({"resourceType": "Patient"}) == "Patient"
    assert resource_type_of({"resourceType": ""}) is None
    assert resource_type_of({}) is None
    assert resource_type_of(object()) is None


def test_resource_type_of_uses_fhir_type_method():
    class Resource:
        def fhir_type(self):
            return "Practitioner"

    assert resource_type_of(Resource()) == "Practitioner"


def test_value_as_string():
    assert value_as_string(False) == "false"
    assert value_as_string(7) == "7"
    assert value_as_string(date(1990, 1, 1)) == "1990-01-01"
    assert value_as_string(datetime(1990, 1, 1, 8, 30)) == "1990-01-01T08:30:00"


def test_equals_ignore_case():
    assert equals_ignore_case("Smith", "sMITH")
    assert equals_ignore_case("Straße", "STRAßE")
    assert not equals_ignore_case("Straße", "STRASSE")
    assert not equals_ignore_case("Smith", "Smyth")


def test_value_as_string_keeps_missing_string_form():
    class Empty:
        def value_as_string(self):
            return None

    assert value_as_string(Empty()) is None


def test_value_as_string_keeps_decimal_precision():
    assert value_as_string(Decimal("1.50")) == "1.50"


def test_resource_type_of_falls_back_when_resource_type_is_a_method():
    class Resource:
        def resource_type(self):
            return "ignored"

        def fhir_type(self):
            return "Observation"

    assert resource_type_of(Resource()) == "Observation"
