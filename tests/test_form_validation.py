"""Tests for client-side form answer checks."""

from payflow.engine.form_validation import validate_form_inputs
from payflow.models import (
    AdditionalInputDisplayText,
    AdditionalInputFormat,
    AdditionalInputImageUri,
    AdditionalInputOption,
    AdditionalInputRegex,
    AuthorizationFlow,
    AuthorizationFlowActions,
    FormAction,
    InputProblem,
    SelectInput,
    TextInput,
    TextWithImageInput,
)

LABEL = AdditionalInputDisplayText(key="label", default="Label")

BRANCH = TextInput(
    id="branch",
    mandatory=True,
    display_text=LABEL,
    format=AdditionalInputFormat.ALPHABETICAL,
    sensitive=False,
    min_length=2,
    max_length=10,
    regexes=[
        AdditionalInputRegex(
            regex="^[A-Za-z ]+$",
            message=AdditionalInputDisplayText(key="letters", default="Letters only"),
        )
    ],
)
ACCOUNT_TYPE = SelectInput(
    id="account_type",
    mandatory=False,
    display_text=LABEL,
    options=[
        AdditionalInputOption(id="personal", display_text=LABEL),
        AdditionalInputOption(id="business", display_text=LABEL),
    ],
)
FORM = [BRANCH, ACCOUNT_TYPE]


class TestValidAnswers:
    def test_all_answers_valid(self):
        result = validate_form_inputs(FORM, {"branch": "Camden", "account_type": "business"})
        assert result.valid is True
        assert result.problems == []

    def test_optional_input_may_be_omitted(self):
        assert validate_form_inputs(FORM, {"branch": "Camden"}).valid

    def test_optional_input_may_be_empty(self):
        assert validate_form_inputs(FORM, {"branch": "Camden", "account_type": ""}).valid

    def test_bounds_are_inclusive(self):
        assert validate_form_inputs([BRANCH], {"branch": "ab"}).valid
        assert validate_form_inputs([BRANCH], {"branch": "a" * 10}).valid

    def test_unparseable_regex_is_skipped(self):
        loose = BRANCH.model_copy(update={"regexes": [AdditionalInputRegex(regex="([", message=LABEL)]})
        assert validate_form_inputs([loose], {"branch": "Camden"}).valid


class TestProblems:
    def test_missing_mandatory(self):
        result = validate_form_inputs(FORM, {})
        assert not result.valid
        assert [(p.input_id, p.reason) for p in result.problems] == [
            ("branch", InputProblem.MISSING_MANDATORY)
        ]

    def test_empty_mandatory(self):
        result = validate_form_inputs(FORM, {"branch": ""})
        assert result.problems[0].reason == InputProblem.MISSING_MANDATORY

    def test_too_short(self):
        result = validate_form_inputs(FORM, {"branch": "A"})
        assert result.problems[0].reason == InputProblem.TOO_SHORT

    def test_too_long(self):
        result = validate_form_inputs(FORM, {"branch": "Camden Town"})
        assert result.problems[0].reason == InputProblem.TOO_LONG

    def test_regex_mismatch_uses_form_message(self):
        result = validate_form_inputs(FORM, {"branch": "Camden 1"})
        problem = result.problems[0]
        assert problem.reason == InputProblem.REGEX_MISMATCH
        assert problem.message == "Letters only"

    def test_unknown_option(self):
        result = validate_form_inputs(FORM, {"branch": "Camden", "account_type": "savings"})
        assert [(p.input_id, p.reason) for p in result.problems] == [
            ("account_type", InputProblem.UNKNOWN_OPTION)
        ]

    def test_unknown_input(self):
        result = validate_form_inputs(FORM, {"branch": "Camden", "pin": "1234"})
        assert [(p.input_id, p.reason) for p in result.problems] == [("pin", InputProblem.UNKNOWN_INPUT)]

    def test_one_problem_per_input(self):
        result = validate_form_inputs(FORM, {"branch": "1", "account_type": "savings"})
        assert {p.input_id for p in result.problems} == {"branch", "account_type"}
        assert len(result.problems) == 2


class TestImageInputs:
    CHALLENGE = TextWithImageInput(
        id="challenge",
        mandatory=True,
        display_text=LABEL,
        format=AdditionalInputFormat.NUMERICAL,
        sensitive=True,
        min_length=6,
        max_length=6,
        regexes=[AdditionalInputRegex(regex="^[0-9]+$", message=LABEL)],
        image=AdditionalInputImageUri(uri="https://bank.test/challenge.png"),
    )

    def test_text_rules_apply_to_image_inputs(self):
        assert validate_form_inputs([self.CHALLENGE], {"challenge": "123456"}).valid
        assert validate_form_inputs([self.CHALLENGE], {"challenge": "12345"}).problems[0].reason == InputProblem.TOO_SHORT
        assert validate_form_inputs([self.CHALLENGE], {"challenge": "12345a"}).problems[0].reason == InputProblem.REGEX_MISMATCH

    def test_flow_next_action_feeds_the_validator(self):
        flow = AuthorizationFlow(actions=AuthorizationFlowActions(next=FormAction(inputs=[self.CHALLENGE, BRANCH])))
        result = validate_form_inputs(flow.next_action.inputs, {"challenge": "123456"})
        assert [(p.input_id, p.reason) for p in result.problems] == [("branch", InputProblem.MISSING_MANDATORY)]
