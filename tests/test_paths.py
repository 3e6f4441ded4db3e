from datetime import date, datetime
from decimal import Decimal

import pytest

from mdmblock import DottedPathEvaluator, PathEvaluationError
from mdmblock.paths import infer_type_tag

PATIENT = {
    "resourceType": "Patient",
    "gender": "male",
    "active": True,
    "name": [
        {"family": "Smith", "given": ["John", "Q"]},
        {"family": "Smythe", "given": ["Johnny"]},
    ],
    "identifier": [{"system": "urn:mrn", "value": "123"}],
    "deceasedBoolean": None,
}


@pytest.fixture
def evaluator():
    return DottedPathEvaluator()


def test_member_access(evaluator):
    assert evaluator.evaluate(PATIENT, "gender") == ["male"]


def test_lists_are_flattened(evaluator):
    assert evaluator.evaluate(PATIENT, "name.family") == ["Smith", "Smythe"]
    assert evaluator.evaluate(PATIENT, "name.given") == ["John", "Q", "Johnny"]


def test_leading_resource_type_is_skipped(evaluator):
    assert evaluator.evaluate(PATIENT, "Patient.gender") == ["male"]


def test_missing_and_null_members_are_empty(evaluator):
    assert evaluator.evaluate(PATIENT, "birthDate") == []
    assert evaluator.evaluate(PATIENT, "deceasedBoolean") == []
    assert evaluator.evaluate(PATIENT, "gender.text") == []


def test_indexers(evaluator):
    assert evaluator.evaluate(PATIENT, "name[1].family") == ["Smythe"]
    assert evaluator.evaluate(PATIENT, "name[0].given[1]") == ["Q"]
    assert evaluator.evaluate(PATIENT, "name[5].family") == []


def test_functions(evaluator):
    assert evaluator.evaluate(PATIENT, "name.family.first()") == ["Smith"]
    assert evaluator.evaluate(PATIENT, "name.family.last()") == ["Smythe"]
    assert evaluator.evaluate(PATIENT, "name.count()") == [2]
    assert evaluator.evaluate(PATIENT, "identifier.value.single()") == ["123"]
    assert evaluator.evaluate(PATIENT, "birthDate.exists()") == [False]
    assert evaluator.evaluate(PATIENT, "birthDate.empty()") == [True]


def test_single_raises_on_many_items(evaluator):
    with pytest.raises(PathEvaluationError):
        evaluator.evaluate(PATIENT, "name.family.single()")


@pytest.mark.parametrize(
    "path",
    ["", "   ", "name..family", "name.", "name[x]", "name[0", "name.where()", "name.first(1)", "na-me"],
)
def test_malformed_paths_raise(evaluator, path):
    with pytest.raises(PathEvaluationError):
        evaluator.evaluate(PATIENT, path)


def test_infer_type_tag():
    assert infer_type_tag("x") == "string"
    assert infer_type_tag(True) == "boolean"
    assert infer_type_tag(3) == "integer"
    assert infer_type_tag(1.5) == "decimal"
    assert infer_type_tag(Decimal("1.50")) == "decimal"
    assert infer_type_tag(date(1990, 1, 1)) == "date"
    assert infer_type_tag(datetime(1990, 1, 1, 12, 0)) == "dateTime"
    assert infer_type_tag({"family": "Smith"}) == "object"
    assert infer_type_tag(["a"]) == "list"
    assert infer_type_tag(None) == "null"


def test_infer_type_tag_prefers_fhir_type():
    class HumanName:
        fhir_type = "HumanName"

    assert infer_type_tag(HumanName()) == "HumanName"
