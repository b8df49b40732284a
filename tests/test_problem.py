import pytest

from ncip.problem import (
    NULL,
    TEMPORARY_PROCESSING_FAILURE,
    Problem,
    problem_from_event,
)


class TestProblem(object):

    def test_defaults(self):
        problem = Problem("Unknown Item", "Item is not known.")
        assert "Unknown Item" == problem.ProblemType
        assert "Item is not known." == problem.ProblemDetail
        assert NULL == problem.ProblemElement
        assert NULL == problem.ProblemValue
        assert None == problem.Scheme

    def test_problem_type_is_required(self):
        with pytest.raises(ValueError):
            Problem(None)
        with pytest.raises(ValueError):
            Problem("")

    def test_immutable(self):
        problem = Problem("Unknown Item")
        with pytest.raises(AttributeError):
            problem.ProblemType = "Unknown User"

    def test_with_element_and_value(self):
        problem = Problem("Unknown User", "No such user.")
        attributed = problem.with_element_and_value(
            "UserIdentifierValue", "12345"
        )
        assert "UserIdentifierValue" == attributed.ProblemElement
        assert "12345" == attributed.ProblemValue
        assert "No such user." == attributed.ProblemDetail

        # The original is unchanged.
        assert NULL == problem.ProblemElement

        # Without a value, the value is NULL.
        assert NULL == problem.with_element_and_value("UserId").ProblemValue

    def test_as_dict(self):
        problem = Problem("Unknown Item", "detail", "ItemIdentifierValue", "B1")
        assert dict(
            ProblemType="Unknown Item", ProblemDetail="detail",
            ProblemElement="ItemIdentifierValue", ProblemValue="B1"
        ) == problem.as_dict()

        problem = Problem("Unknown Item", Scheme="http://example.com/")
        assert "http://example.com/" == problem.as_dict()["Scheme"]


class TestProblemFromEvent(object):

    def test_event_with_description(self):
        event = dict(textcode="COPY_NOT_FOUND", desc="Copy not found")
        problem = problem_from_event("Unknown Item", event, "ItemIdentifierValue", "B1")
        assert "Unknown Item" == problem.ProblemType
        assert "Copy not found" == problem.ProblemDetail
        assert "ItemIdentifierValue" == problem.ProblemElement
        assert "B1" == problem.ProblemValue

    def test_type_taken_from_event(self):
        event = dict(ilsevent=dict(textcode="PATRON_BARRED", desc="Barred"))
        problem = problem_from_event(None, event)
        assert "PATRON_BARRED" == problem.ProblemType
        assert "Barred" == problem.ProblemDetail

    def test_permission_failure(self):
        event = dict(textcode="PERM_FAILURE", ilsperm="COPY_CHECKOUT.override")
        problem = problem_from_event("Checkout Failed", event)
        assert "Permission denied: COPY_CHECKOUT" == problem.ProblemDetail

    def test_code_without_description(self):
        problem = problem_from_event(None, dict(textcode="ITEM_LOST"))
        assert "ILS returned ITEM_LOST error." == problem.ProblemDetail

    def test_string_event(self):
        problem = problem_from_event("Checkin Failed", "The ILS said no.")
        assert "Checkin Failed" == problem.ProblemType
        assert "The ILS said no." == problem.ProblemDetail

    def test_nothing_to_go_on(self):
        problem = problem_from_event(None, None)
        assert TEMPORARY_PROCESSING_FAILURE == problem.ProblemType
        assert "Detail not available." == problem.ProblemDetail
        assert NULL == problem.ProblemElement
        assert NULL == problem.ProblemValue

        problem = problem_from_event(None, dict())
        assert TEMPORARY_PROCESSING_FAILURE == problem.ProblemType
